"""Artiforge: build-info recording and parallel artifact deployment.

Listens to a multi-module build, records every successfully built module
(its artifacts, excluded artifacts and merged dependencies) into a single
build-info record, and at session end uploads the artifacts in parallel
before publishing the record.
"""

__version__ = "0.1.0"
__description__ = "Build-info recorder and parallel artifact deployer"

from artiforge.core.deployer import ParallelDeployer
from artiforge.core.recorder import BuildInfoRecorder
from artiforge.cli.app import app as cli

__all__ = ["BuildInfoRecorder", "ParallelDeployer", "cli", "__version__"]
