"""
Preprocessing step classes with a common interface.

Each step implements the PreprocessStep interface. The pipeline owns the
array it passes along, so steps transform it in place and return it; no
copy of a full-size image is made per step.

Usage:
    from preprocessing.steps import AverageGrayscaleStep, Pipeline

    pipeline = Pipeline(steps=[AverageGrayscaleStep()])
    result = pipeline.run(pixels)
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import cv2
import numpy as np

from .normalization import average_grayscale_inplace

logger = logging.getLogger(__name__)


class PreprocessStep(ABC):
    """Base class for preprocessing steps.

    Steps receive an RGBA uint8 array owned by the pipeline. They may
    transform it in place and must return the resulting array.
    """

    @abstractmethod
    def apply(self, img: np.ndarray) -> np.ndarray:
        """Apply this preprocessing step to an RGBA image.

        Args:
            img: RGBA array of shape (height, width, 4).

        Returns:
            The processed array (may be ``img`` itself).
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for logging and debugging."""
        pass

    def get_metadata(self) -> dict[str, Any]:
        """Return any metadata produced by the last apply() call."""
        return {}


@dataclass(frozen=True)
class AverageGrayscaleStep(PreprocessStep):
    """Replace R, G and B with their arithmetic mean, keeping alpha."""

    def apply(self, img: np.ndarray) -> np.ndarray:
        return average_grayscale_inplace(img)

    @property
    def name(self) -> str:
        return "grayscale"


@dataclass
class StepResult:
    """Outcome of applying a single preprocessing step.

    Attributes:
        name: Name of the step.
        metadata: Any metadata produced by the step.
        artifact_path: Path where the step output was saved (if artifact saving enabled).
    """

    name: str
    metadata: dict[str, Any] = field(default_factory=dict)
    artifact_path: str | None = None


@dataclass
class PipelineStepResults:
    """Results from running a preprocessing pipeline.

    Attributes:
        final: The image after the last step.
        steps: StepResult for each step in order.
        original_artifact_path: Path where the input was saved (if artifact saving enabled).
    """

    final: np.ndarray
    steps: list[StepResult] = field(default_factory=list)
    original_artifact_path: str | None = None

    @property
    def step_metadata(self) -> dict[str, dict[str, Any]]:
        """Metadata keyed by step name."""
        return {step.name: step.metadata for step in self.steps}

    @property
    def artifact_paths(self) -> dict[str, str]:
        """Dict with keys like "original", "grayscale" mapped to saved paths."""
        paths = {}
        if self.original_artifact_path:
            paths["original"] = self.original_artifact_path
        for step in self.steps:
            if step.artifact_path:
                paths[step.name] = step.artifact_path
        return paths


def _save_image(img: np.ndarray, path: str) -> None:
    """Save an RGBA image to disk as PNG."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    cv2.imwrite(path, cv2.cvtColor(img, cv2.COLOR_RGBA2BGRA))


@dataclass
class Pipeline:
    """A sequence of preprocessing steps applied to one image.

    Attributes:
        steps: PreprocessStep instances to apply in order.
    """

    steps: list[PreprocessStep]

    def run(
        self,
        img: np.ndarray,
        artifact_dir: str | None = None,
    ) -> PipelineStepResults:
        """Run the pipeline on an image, transforming it in place.

        Args:
            img: RGBA array. Ownership passes to the pipeline.
            artifact_dir: Optional directory to save the input (original.png)
                          and each step's output for debugging.

        Returns:
            PipelineStepResults with the final image and per-step metadata.
        """
        result = PipelineStepResults(final=img)

        if artifact_dir:
            original_path = f"{artifact_dir}/original.png"
            _save_image(img, original_path)
            result.original_artifact_path = original_path

        current = img
        for step in self.steps:
            current = step.apply(current)
            logger.debug("Applied preprocessing step %s", step.name)

            artifact_path = None
            if artifact_dir:
                artifact_path = f"{artifact_dir}/{step.name}.png"
                _save_image(current, artifact_path)

            result.steps.append(
                StepResult(
                    name=step.name,
                    metadata=step.get_metadata(),
                    artifact_path=artifact_path,
                )
            )

        result.final = current
        return result

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self):
        return iter(self.steps)
