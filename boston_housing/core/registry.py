"""
Registry for model builders and loss functions.

Provides a decorator-based registration system so the CLI and config layer
can refer to models and losses by name.

Usage:
    from boston_housing.core.registry import registry

    @registry.register_model("linear")
    def linear_regression_model(num_features):
        ...

    build = registry.get_model("linear")
    model = build(num_features=12)
"""

from typing import Any, Callable, Dict

import torch.nn.functional as F


class Registry:
    """Central registry for model builders and loss functions."""

    def __init__(self):
        self._models: Dict[str, Callable] = {}
        self._losses: Dict[str, Callable] = {}

    # ==================== Model Registration ====================

    def register_model(self, name: str):
        """
        Decorator to register a model builder.

        Args:
            name: Model name (e.g., "linear", "mlp")

        Example:
            @registry.register_model("mlp")
            def multi_layer_perceptron_regression_model(num_features):
                ...
        """

        def decorator(builder: Callable) -> Callable:
            self._models[name] = builder
            return builder

        return decorator

    def get_model(self, name: str) -> Callable:
        """Get a registered model builder."""
        if name not in self._models:
            raise KeyError(f"Model '{name}' not found. Available: {self.list_models()}")
        return self._models[name]

    def list_models(self) -> list:
        """List all registered model names."""
        return list(self._models.keys())

    # ==================== Loss Registration ====================

    def register_loss(self, name: str):
        """
        Decorator to register a loss function.

        Loss functions take ``(model, inputs, targets)`` and return a scalar
        tensor.
        """

        def decorator(func: Callable) -> Callable:
            self._losses[name] = func
            return func

        return decorator

    def get_loss(self, name: str) -> Callable:
        """Get a registered loss function."""
        if name not in self._losses:
            raise KeyError(f"Loss '{name}' not found. Available: {self.list_losses()}")
        return self._losses[name]

    def list_losses(self) -> list:
        """List all registered loss functions."""
        return list(self._losses.keys())

    def summary(self) -> Dict[str, Any]:
        """Get a summary of all registered components."""
        return {"models": self.list_models(), "losses": self.list_losses()}


# Global registry instance
registry = Registry()


@registry.register_loss("mse")
def mse_loss(model, inputs, targets):
    """Mean squared error loss for regression."""
    outputs = model(inputs)
    return F.mse_loss(outputs, targets)


@registry.register_loss("mae")
def mae_loss(model, inputs, targets):
    """Mean absolute error loss."""
    outputs = model(inputs)
    return F.l1_loss(outputs, targets)
