"""
Config-driven runs: seed, train one or more models, save everything to an
output directory.
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from loguru import logger

from .app import BostonHousingApp
from .core.data import BASE_URL, BostonHousingDataset
from .core.observers import CompositeObserver, HistoryObserver, LoggingObserver
from .core.storage import HistoryStorage
from .core.trainer import Trainer
from .utils import (
    apply_overrides,
    count_parameters,
    create_output_dir,
    get_device,
    get_system_info,
    load_config,
    save_config,
    set_seed,
)


class HousingExperiment:
    """
    Run the housing demo from a configuration dictionary.

    Output directory contents:
        config.yaml     resolved configuration
        results.yaml    baseline, final losses and parameter counts per model
        history.duckdb  per-epoch loss points (if output.save_history)
        history.json    the same points exported for plotting

    Model builder arguments come from ``model.params``, keyed by model name.

    Example:
        exp = HousingExperiment(get_default_config(), models=["linear", "mlp"])
        results = exp.run()
    """

    def __init__(
        self,
        config: Dict[str, Any],
        output_dir: Optional[Union[str, Path]] = None,
        models: Optional[List[str]] = None,
        dataset: Optional[BostonHousingDataset] = None,
    ):
        self.config = config
        experiment = config.get("experiment", {})
        self.name = experiment.get("name", "boston_housing")
        self.seed = experiment.get("seed", 42)

        if models is None:
            model_name = config.get("model", {}).get("name", "linear")
            models = model_name if isinstance(model_name, list) else [model_name]
        self.models = models

        if output_dir is None:
            output_dir = create_output_dir(
                base_dir=config.get("output", {}).get("base_dir", "outputs"),
                name=self.name,
            )
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        dataset_config = config.get("dataset", {})
        self.dataset = dataset or BostonHousingDataset(
            base_url=dataset_config.get("base_url", BASE_URL),
            data_dir=dataset_config.get("data_dir", "./data"),
            seed=self.seed,
            shuffle=dataset_config.get("shuffle", True),
            timeout=dataset_config.get("timeout", 30),
        )

        self.device = get_device(config.get("training", {}).get("device"))

        logger.info(f"Experiment initialized: {self.name}")
        logger.info(f"Output directory: {self.output_dir}")
        logger.info(f"Device: {self.device}")

    def run(self) -> Dict[str, Any]:
        """
        Train every configured model and save the results.

        Returns:
            Dictionary with baseline, per-model results and output paths
        """
        set_seed(self.seed)
        save_config(self.config, self.output_dir / "config.yaml")

        storage = None
        if self.config.get("output", {}).get("save_history", True):
            storage = HistoryStorage(str(self.output_dir / "history.duckdb"), mode="create")

        observer = CompositeObserver([LoggingObserver()])
        trainer = Trainer.from_config(self.config, device=self.device)
        app = BostonHousingApp(self.dataset, trainer=trainer, observer=observer)
        model_params = self.config.get("model", {}).get("params") or {}

        try:
            app.setup()
            if storage is not None:
                storage.save_baseline(app.baseline)

            model_results: Dict[str, Any] = {}
            for name in self.models:
                logger.info("=" * 60)
                logger.info(f"Training model: {name}")
                logger.info("=" * 60)

                history = HistoryObserver(name, storage)
                observer.observers.append(history)
                try:
                    result = app.train(name, **(model_params.get(name) or {}))
                finally:
                    observer.observers.remove(history)

                params = count_parameters(app.model)
                logger.info(f"{name}: {params['trainable']:,} trainable parameters")
                model_results[name] = {
                    "final_train_loss": result.final_train_loss,
                    "final_val_loss": result.final_val_loss,
                    "test_loss": result.test_loss,
                    "parameters": params["trainable"],
                }

            results: Dict[str, Any] = {
                "output_dir": str(self.output_dir),
                "baseline_loss": app.baseline,
                "models": model_results,
                "history_path": None,
            }

            if storage is not None:
                storage.save_metadata(
                    {
                        "experiment": self.config.get("experiment", {}),
                        "training": self.config.get("training", {}),
                        "feature_names": self.dataset.feature_names,
                        "system": get_system_info(),
                        "created_at": datetime.now().isoformat(),
                    }
                )
                history_path = self.output_dir / "history.json"
                storage.export_for_frontend(str(history_path))
                results["history_path"] = str(history_path)
        finally:
            if storage is not None:
                storage.close()

        save_config(results, self.output_dir / "results.yaml")
        logger.info(f"Experiment complete! Results saved to: {self.output_dir}")
        return results


def run_from_file(
    config_path: Union[str, Path],
    overrides: Optional[List[str]] = None,
    output_dir: Optional[str] = None,
    models: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """
    Run an experiment from a YAML config file.

    Args:
        config_path: Path to the YAML config file
        overrides: List of config overrides
        output_dir: Optional output directory override
        models: Model names overriding ``model.name``

    Returns:
        Experiment results dictionary
    """
    config = load_config(config_path)
    if overrides:
        config = apply_overrides(config, overrides)

    exp = HousingExperiment(config, output_dir=output_dir, models=models)
    return exp.run()
