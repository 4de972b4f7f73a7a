"""
Model definitions for Boston Housing price regression.
"""

from typing import List

import torch.nn as nn

from .registry import registry

HIDDEN_UNITS = 50


def _dense(in_features: int, out_features: int) -> nn.Linear:
    # Glorot-uniform kernel, zero bias
    layer = nn.Linear(in_features, out_features)
    nn.init.xavier_uniform_(layer.weight)
    nn.init.zeros_(layer.bias)
    return layer


@registry.register_model("linear")
def linear_regression_model(num_features: int) -> nn.Sequential:
    """
    Build a linear regression model: a single dense layer with one unit.

    Args:
        num_features: Number of input features

    Returns:
        The linear regression model
    """
    return nn.Sequential(_dense(num_features, 1))


@registry.register_model("mlp")
def multi_layer_perceptron_regression_model(
    num_features: int, hidden_units: int = HIDDEN_UNITS
) -> nn.Sequential:
    """
    Build a multi-layer perceptron regression model with two hidden layers,
    each with ``hidden_units`` units activated by sigmoid.

    Args:
        num_features: Number of input features
        hidden_units: Width of each hidden layer

    Returns:
        The multi-layer perceptron regression model
    """
    return nn.Sequential(
        _dense(num_features, hidden_units),
        nn.Sigmoid(),
        _dense(hidden_units, hidden_units),
        nn.Sigmoid(),
        _dense(hidden_units, 1),
    )


def build_model(name: str, num_features: int, **params) -> nn.Module:
    """Build a registered model by name."""
    return registry.get_model(name)(num_features, **params)


def dense_layers(model: nn.Module) -> List[nn.Linear]:
    """Return the dense layers of ``model`` in order."""
    return [m for m in model.modules() if isinstance(m, nn.Linear)]


def layer_activations(model: nn.Sequential) -> List[str]:
    """Activation name applied after each dense layer ("linear" if none)."""
    activations = {nn.Sigmoid: "sigmoid", nn.ReLU: "relu", nn.Tanh: "tanh"}
    children = list(model.children())
    result = []
    for i, module in enumerate(children):
        if not isinstance(module, nn.Linear):
            continue
        nxt = children[i + 1] if i + 1 < len(children) else None
        result.append(activations.get(type(nxt), "linear"))
    return result


def describe_model(model: nn.Module) -> List[str]:
    """One line per dense layer, e.g. ``"dense(12 -> 50, sigmoid)"``."""
    return [
        f"dense({layer.in_features} -> {layer.out_features}, {act})"
        for layer, act in zip(dense_layers(model), layer_activations(model))
    ]
