"""
Persistence Module

Saves and loads named objects (partitions, model sets, forecast tables) as
one joblib artifact per file under <data_root>/<example>/.
"""

import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Union

import joblib

from config import DATA_CONFIG

ARTIFACT_MODE = 0o644


def artifact_path(example: str, filename: str, data_root: Optional[Union[str, Path]] = None) -> Path:
    """
    Location of an artifact

    Args:
        example: Example/dataset identifier, e.g. 'grocery_sales'
        filename: Artifact file name
        data_root: Root directory. If None, uses config DATA_CONFIG['data_root']

    Returns:
        Path of the artifact
    """
    if data_root is None:
        data_root = DATA_CONFIG['data_root']
    return Path(data_root) / example / filename


def save_objects(objects: Dict[str, object],
                 example: str,
                 filename: str,
                 data_root: Optional[Union[str, Path]] = None) -> Path:
    """
    Save named objects into a single artifact, replacing any previous one

    The artifact is written to a temporary file in the same directory and
    renamed into place, so readers never see a partial file.

    Args:
        objects: Name -> object
        example: Example/dataset identifier
        filename: Artifact file name
        data_root: Root directory

    Returns:
        Path of the saved artifact
    """
    if not objects:
        raise ValueError("nothing to save")

    path = artifact_path(example, filename, data_root)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix='.tmp')
    os.close(fd)

    try:
        joblib.dump(dict(objects), tmp_name, compress=3)
        # mkstemp creates the file owner-only
        os.chmod(tmp_name, ARTIFACT_MODE)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)
        raise

    print(f"  ✓ Saved {', '.join(objects)} to {path}")
    return path


def load_objects(example: str,
                 filename: str,
                 data_root: Optional[Union[str, Path]] = None) -> Dict[str, object]:
    """
    Load the named objects of an artifact

    Args:
        example: Example/dataset identifier
        filename: Artifact file name
        data_root: Root directory

    Returns:
        Name -> object, as saved

    Raises:
        FileNotFoundError: If the artifact does not exist
    """
    path = artifact_path(example, filename, data_root)

    if not path.exists():
        raise FileNotFoundError(f"Artifact not found: {path}")

    objects = joblib.load(path)
    if not isinstance(objects, dict):
        raise ValueError(f"Artifact {path} does not hold named objects")

    print(f"  Loaded {', '.join(objects)} from {path}")
    return objects
