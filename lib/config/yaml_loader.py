"""Safe YAML loader."""
from pathlib import Path
from typing import Any, Dict, Union

import yaml


def load_yaml(path: Union[str, Path]) -> Dict[str, Any]:
    """Return the mapping stored in ``path``; an empty file yields ``{}``.

    JSON is a subset of YAML so ``.json`` artifacts load through here too.
    """

    with open(path, encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")
    return data
