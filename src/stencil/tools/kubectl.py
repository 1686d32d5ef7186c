from dataclasses import dataclass
import os
from pathlib import Path
import shlex
import subprocess

from loguru import logger

from stencil.documents import dump_manifests
from stencil.tools.types import Manifests


@dataclass
class KubectlError(Exception):
    statuscode: int
    stderr: str | None = None

    def __str__(self) -> str:
        message = f"Kubectl command failed with status code {self.statuscode}"
        if self.stderr:
            message += f": {self.stderr}"
        return message


class Kubectl:
    """
    Wrapper for sending manifests to a cluster with `kubectl`. Connection settings are taken from the environment
    unless a kubeconfig file or context is given.
    """

    def __init__(self, kubeconfig: Path | None = None, context: str | None = None) -> None:
        self.env: dict[str, str] = {}
        self.context = context
        if kubeconfig is not None:
            self.env["KUBECONFIG"] = str(kubeconfig)

    def apply(self, manifests: Manifests, server_side: bool = True, force_conflicts: bool = False) -> None:
        """
        Apply the given manifests to the cluster in a single `kubectl apply` invocation, in the order given.
        """

        command = ["kubectl", "apply", "-f", "-"]
        if self.context:
            command.extend(["--context", self.context])
        if server_side:
            command.append("--server-side")
        if force_conflicts:
            command.append("--force-conflicts")

        logger.debug("Applying manifests with command: $ {command}", command=" ".join(map(shlex.quote, command)))
        status = subprocess.run(
            command,
            input=dump_manifests(manifests),
            text=True,
            env={**os.environ, **self.env},
            capture_output=True,
        )
        if status.returncode:
            raise KubectlError(status.returncode, status.stderr)
        logger.info("{}", status.stdout.strip())
