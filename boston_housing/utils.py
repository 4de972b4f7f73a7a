"""
Utility functions: configuration, seeding, devices and output directories.
"""

import copy
import platform
import random
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import numpy as np
import torch
import yaml
from loguru import logger

from .core.data import BASE_URL
from .core.trainer import BATCH_SIZE, LEARNING_RATE, NUM_EPOCHS


def set_seed(seed: int):
    """Set random seed for reproducibility."""
    random.seed(seed)
    np.random.seed(seed)
    torch.manual_seed(seed)
    if torch.cuda.is_available():
        torch.cuda.manual_seed_all(seed)


def get_device(preferred: Optional[str] = None) -> torch.device:
    """Get the requested device, or the best available one."""
    if preferred and preferred != "auto":
        return torch.device(preferred)
    if torch.cuda.is_available():
        return torch.device("cuda")
    elif hasattr(torch.backends, "mps") and torch.backends.mps.is_available():
        return torch.device("mps")
    return torch.device("cpu")


def get_default_config() -> Dict[str, Any]:
    """Get default configuration template."""
    return {
        "experiment": {
            "name": "boston_housing",
            "seed": 42,
        },
        "dataset": {
            "base_url": BASE_URL,
            "data_dir": "./data",
            "shuffle": True,
            "timeout": 30,
        },
        "model": {
            "name": "linear",
            "params": {},
        },
        "training": {
            "epochs": NUM_EPOCHS,
            "batch_size": BATCH_SIZE,
            "optimizer": {
                "name": "sgd",
                "lr": LEARNING_RATE,
                "momentum": 0.0,
                "weight_decay": 0.0,
            },
            "loss": "mse",
            "device": "cpu",
        },
        "output": {
            "base_dir": "outputs",
            "save_history": True,
        },
    }


def merge_configs(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Return a deep copy of ``base`` with ``override`` merged in, section by section."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        section = merged.get(key)
        if isinstance(section, dict) and isinstance(value, dict):
            value = merge_configs(section, value)
        merged[key] = value
    return merged


def load_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a YAML configuration file on top of the defaults.

    Args:
        config_path: Path to the YAML config file

    Returns:
        Configuration dictionary
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        config = yaml.safe_load(f) or {}

    return merge_configs(get_default_config(), config)


def apply_overrides(config: Dict[str, Any], overrides: List[str]) -> Dict[str, Any]:
    """
    Set ``section.key=value`` overrides in place, creating missing sections.

    Entries without ``=`` are logged and skipped.
    """
    for override in overrides:
        key_path, sep, raw = override.partition("=")
        if not sep:
            logger.warning(f"Ignoring override without '=': {override}")
            continue

        *parents, leaf = key_path.strip().split(".")
        node = config
        for key in parents:
            if not isinstance(node.get(key), dict):
                node[key] = {}
            node = node[key]
        node[leaf] = parse_value(raw)

    return config


def parse_value(value_str: str) -> Any:
    """Read an override value as a YAML scalar or flow list; "none" means None."""
    value_str = value_str.strip()
    if value_str.lower() == "none":
        return None

    try:
        value = yaml.safe_load(value_str)
    except yaml.YAMLError:
        return value_str

    # PyYAML keeps exponents without a dot ("1e-3") as plain strings
    if isinstance(value, str) and value == value_str:
        try:
            return float(value)
        except ValueError:
            pass
    return value


def create_output_dir(
    base_dir: str = "outputs",
    name: str = "",
    timestamp: bool = True,
) -> Path:
    """
    Create a unique output directory for a run.

    Args:
        base_dir: Base output directory
        name: Run name
        timestamp: Whether to include timestamp

    Returns:
        Path to the created directory
    """
    name_parts = []
    if name:
        name_parts.append(name)
    if timestamp:
        name_parts.append(datetime.now().strftime("%Y%m%d_%H%M%S"))

    output_dir = Path(base_dir, "_".join(name_parts)) if name_parts else Path(base_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    return output_dir


def save_config(config: Dict[str, Any], path: Union[str, Path]):
    """Save configuration to a YAML file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        yaml.safe_dump(config, f, default_flow_style=False, sort_keys=False)


def find_configs(config_dir: Union[str, Path]) -> List[Path]:
    """Find all YAML config files in a directory."""
    config_dir = Path(config_dir)
    if not config_dir.is_dir():
        return []
    return sorted(config_dir.glob("*.yaml")) + sorted(config_dir.glob("*.yml"))


def count_parameters(model: torch.nn.Module) -> Dict[str, int]:
    """Count model parameters."""
    total = sum(p.numel() for p in model.parameters())
    trainable = sum(p.numel() for p in model.parameters() if p.requires_grad)
    return {"total": total, "trainable": trainable}


def get_system_info() -> Dict[str, Any]:
    """Interpreter and torch versions stored with each run's metadata."""
    return {
        "platform": platform.platform(),
        "python_version": platform.python_version(),
        "pytorch_version": torch.__version__,
        "cuda_available": torch.cuda.is_available(),
    }
