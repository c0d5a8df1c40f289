# config.py

import os
from typing import Optional

import yaml

PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))
DEFAULT_CONFIG_PATH = os.path.join(PACKAGE_DIR, "config.yaml")


# Function to load configuration
def load_config(path: Optional[str] = None) -> dict:
    if path is None:
        path = DEFAULT_CONFIG_PATH

    try:
        with open(path, 'r') as f:
            config = yaml.safe_load(f) or {}
            print(f"Configuration loaded successfully from: {path}")
            return config
    except FileNotFoundError:
        print(f"Configuration file not found: {path}")
        return {}
    except yaml.YAMLError as e:
        print(f"Error parsing YAML file: {e}")
        return {}


def resolve_path(path: str) -> str:
    """Resolve a configured path; relative paths are taken from the package directory."""
    path = os.path.expanduser(path)
    if os.path.isabs(path):
        return path
    return os.path.join(PACKAGE_DIR, path)
