#!/usr/bin/env python3
"""
Base Component Class for Discovery-Processing-Housekeeping Pattern

This module provides the BaseComponent class that BIG-IP resource components
inherit from. A component discovers the current state of a device object,
processes the changes needed to reach the declared state, and housekeeps by
verifying the result and recording the final state record as an artifact.
"""

import logging
import json
import datetime
import traceback
import uuid
from typing import Dict, List, Any, Optional, TypedDict, Literal, Callable


class ComponentConfig(TypedDict, total=False):
    """TypedDict for component configuration."""
    component_id: str
    log_level: str
    dry_run: bool


class TimestampData(TypedDict):
    """TypedDict for tracking execution timestamps."""
    start: Optional[str]
    discover_start: Optional[str]
    discover_end: Optional[str]
    process_start: Optional[str]
    process_end: Optional[str]
    housekeep_start: Optional[str]
    housekeep_end: Optional[str]
    end: Optional[str]


class StatusData(TypedDict):
    """TypedDict for component execution status."""
    success: bool
    error: Optional[str]
    message: Optional[str]


class PhaseResults(TypedDict, total=False):
    """TypedDict for phase results."""
    discovery: Dict[str, Any]
    processing: Dict[str, Any]
    housekeeping: Dict[str, Any]
    error: Optional[str]
    traceback: Optional[str]
    metadata: Dict[str, Any]


class ArtifactMetadata(TypedDict, total=False):
    """TypedDict for artifact metadata."""
    artifact_id: str
    artifact_type: str
    component_id: str
    component_name: str
    timestamp: str
    resource_id: Optional[str]
    description: Optional[str]


class Artifact(TypedDict):
    """TypedDict for artifact data."""
    id: str
    type: str
    content: Any
    metadata: ArtifactMetadata


class ExecutionSummary(TypedDict):
    """TypedDict for execution summary."""
    component_id: str
    component_name: str
    status: StatusData
    timestamps: TimestampData
    phases_executed: Dict[str, bool]
    artifacts_count: int
    discovery_results_count: int
    processing_results_count: int
    housekeeping_results_count: int


Phase = Literal["discover", "process", "housekeep"]

PHASE_LABELS: Dict[str, str] = {
    'discover': 'Discovery',
    'process': 'Processing',
    'housekeep': 'Housekeeping',
}


def _now() -> str:
    return datetime.datetime.now().isoformat()


class BaseComponent:
    """
    Base class for all device resource components.

    Implements the discovery-processing-housekeeping pattern and provides
    common functionality for component lifecycle management. Derived classes
    override ``_discover``, ``_process`` and ``_housekeep``; the public phase
    methods wrap them with timestamps, status tracking and error logging.
    """

    def __init__(self, config: ComponentConfig, logger: Optional[logging.Logger] = None) -> None:
        """
        Initialize a new component instance.

        Args:
            config: Configuration dictionary for the component
            logger: Optional logger instance (if not provided, a new one will be created)
        """
        self.config = config
        self.component_id: str = config.get('component_id', str(uuid.uuid4()))
        self.component_name: str = self.__class__.__name__

        self.logger: logging.Logger = logger or self._setup_logger()

        self.discovery_results: Dict[str, Any] = {}
        self.processing_results: Dict[str, Any] = {}
        self.housekeeping_results: Dict[str, Any] = {}

        self.artifacts: List[Artifact] = []

        self.phases_executed: Dict[str, bool] = {
            'discover': False,
            'process': False,
            'housekeep': False
        }

        self.timestamps: TimestampData = {
            'start': None,
            'discover_start': None,
            'discover_end': None,
            'process_start': None,
            'process_end': None,
            'housekeep_start': None,
            'housekeep_end': None,
            'end': None
        }

        self.status: StatusData = {
            'success': False,
            'error': None,
            'message': None
        }

        self.logger.info(f"Initialized {self.component_name} (ID: {self.component_id})")

    def _setup_logger(self) -> logging.Logger:
        """
        Set up a logger for this component.

        Returns:
            A configured logger instance
        """
        logger = logging.getLogger(self.component_name)
        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)
            logger.setLevel(self.config.get('log_level', 'INFO'))
        return logger

    def _run_phase(self, phase: Phase, body: Callable[[], Dict[str, Any]]) -> Dict[str, Any]:
        """
        Run one lifecycle phase with timestamps and status bookkeeping.

        Args:
            phase: Name of the phase being run
            body: Callable doing the phase work and returning its results

        Returns:
            Dictionary of phase results
        """
        label = PHASE_LABELS[phase]
        self.timestamps[f'{phase}_start'] = _now()
        self.logger.info(f"Starting {label.lower()} phase for {self.component_name}")

        try:
            results = body()

            self.phases_executed[phase] = True
            self.timestamps[f'{phase}_end'] = _now()
            self.logger.info(f"{label} phase completed for {self.component_name}")

            return results

        except Exception as e:
            self.logger.error(f"Error during {label.lower()} phase: {str(e)}")
            self.logger.debug(traceback.format_exc())
            self.status['success'] = False
            self.status['error'] = str(e)
            self.status['message'] = f"{label} phase failed: {str(e)}"

            # Update timestamp even on failure
            self.timestamps[f'{phase}_end'] = _now()

            raise

    def discover(self) -> Dict[str, Any]:
        """
        Discovery phase: Examine the device object without making changes.

        Returns:
            Dictionary of discovery results
        """
        return self._run_phase('discover', self._discover)

    def process(self) -> Dict[str, Any]:
        """
        Processing phase: Apply the changes needed to reach the declared state.

        Returns:
            Dictionary of processing results
        """
        if not self.phases_executed['discover']:
            self.logger.warning("Processing without prior discovery may lead to unexpected results")
        return self._run_phase('process', self._process)

    def housekeep(self) -> Dict[str, Any]:
        """
        Housekeeping phase: Verify the result and store artifacts.

        Returns:
            Dictionary of housekeeping results
        """
        if not self.phases_executed['process']:
            self.logger.warning("Housekeeping without prior processing may lead to unexpected results")

        def body() -> Dict[str, Any]:
            results = self._housekeep()
            if self.artifacts:
                self._store_artifacts()
            return results

        return self._run_phase('housekeep', body)

    def _discover(self) -> Dict[str, Any]:
        self.logger.warning(f"Default discovery implementation called for {self.component_name}")
        return self.discovery_results

    def _process(self) -> Dict[str, Any]:
        self.logger.warning(f"Default processing implementation called for {self.component_name}")
        return self.processing_results

    def _housekeep(self) -> Dict[str, Any]:
        self.logger.warning(f"Default housekeeping implementation called for {self.component_name}")
        return self.housekeeping_results

    def execute(self, phases: Optional[List[Phase]] = None) -> PhaseResults:
        """
        Execute the component lifecycle phases.

        Args:
            phases: List of phases to execute (default: all phases)

        Returns:
            Dictionary with the results of all executed phases
        """
        phases = phases or ["discover", "process", "housekeep"]
        self.timestamps['start'] = _now()
        self.logger.info(f"Executing {self.component_name} with phases: {', '.join(phases)}")

        results: PhaseResults = {}

        try:
            if "discover" in phases:
                results["discovery"] = self.discover()

            if "process" in phases:
                results["processing"] = self.process()

            if "housekeep" in phases:
                results["housekeeping"] = self.housekeep()

            self.status['success'] = True
            self.status['message'] = "Execution completed successfully"

        except Exception as e:
            # Status was updated by the phase that failed
            results["error"] = str(e)
            results["traceback"] = traceback.format_exc()

        finally:
            self.timestamps['end'] = _now()

            results["metadata"] = {
                "component_id": self.component_id,
                "component_name": self.component_name,
                "timestamps": self.timestamps,
                "phases_executed": self.phases_executed,
                "status": self.status
            }

            self.logger.info(f"Execution of {self.component_name} completed with status: {self.status['success']}")

        return results

    def add_artifact(self, artifact_type: str, content: Any, metadata: Optional[Dict[str, Any]] = None) -> str:
        """
        Add an artifact to be stored during housekeeping.

        Args:
            artifact_type: Type of artifact (e.g., 'state', 'payload')
            content: The artifact content
            metadata: Additional metadata for the artifact

        Returns:
            Artifact ID
        """
        artifact_id = str(uuid.uuid4())

        artifact_metadata: ArtifactMetadata = {
            "artifact_id": artifact_id,
            "artifact_type": artifact_type,
            "component_id": self.component_id,
            "component_name": self.component_name,
            "timestamp": _now(),
            **(metadata or {})
        }

        self.artifacts.append({
            "id": artifact_id,
            "type": artifact_type,
            "content": content,
            "metadata": artifact_metadata
        })

        self.logger.debug(f"Added artifact: {artifact_id} ({artifact_type})")

        return artifact_id

    def _store_artifacts(self) -> None:
        """
        Log the registered artifacts.

        Components persisting their state elsewhere override this.
        """
        if not self.artifacts:
            self.logger.debug("No artifacts to store")
            return

        self.logger.info(f"Recorded {len(self.artifacts)} artifacts")
        for artifact in self.artifacts:
            self.logger.debug(f"Artifact: {artifact['id']} ({artifact['type']})")

    def get_execution_summary(self) -> ExecutionSummary:
        """
        Get a summary of this component's execution.

        Returns:
            Dictionary with execution summary
        """
        return {
            "component_id": self.component_id,
            "component_name": self.component_name,
            "status": self.status,
            "timestamps": self.timestamps,
            "phases_executed": self.phases_executed,
            "artifacts_count": len(self.artifacts),
            "discovery_results_count": len(self.discovery_results),
            "processing_results_count": len(self.processing_results),
            "housekeeping_results_count": len(self.housekeeping_results)
        }

    def to_json(self) -> str:
        """
        Convert component results to a JSON string.

        Returns:
            JSON string representation of the component results
        """
        results = {
            "component_id": self.component_id,
            "component_name": self.component_name,
            "timestamps": self.timestamps,
            "phases_executed": self.phases_executed,
            "status": self.status,
            "discovery_results": self.discovery_results,
            "processing_results": self.processing_results,
            "housekeeping_results": self.housekeeping_results,
            "artifacts": [
                {
                    "id": a["id"],
                    "type": a["type"],
                    "content": a["content"],
                    "metadata": a["metadata"]
                }
                for a in self.artifacts
            ]
        }

        return json.dumps(results, indent=2, default=str)
