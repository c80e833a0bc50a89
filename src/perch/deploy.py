"""Static resource deployment.

Controls that need CSS or JavaScript ship it as package resources and
copy it into the application's ``deploy_dir`` from ``on_deploy`` once,
at startup. Copies are idempotent: an existing target is never
overwritten, so edited deployed files survive restarts.
"""

import logging
import shutil
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path

logger = logging.getLogger("perch.deploy")

CONTROL_CSS = "control.css"


class ResourceDeployer:
    """Copies package resources below ``target_dir``.

    Usage::

        deployer = ResourceDeployer(config.deploy_dir)
        deployer.deploy_package_resource("perch.resources", "control.css", "perch")
    """

    __slots__ = ("_deployed", "target_dir")

    def __init__(self, target_dir: str | Path) -> None:
        self.target_dir = Path(target_dir)
        self._deployed: set[Path] = set()

    @property
    def deployed(self) -> frozenset[Path]:
        """Targets copied (or found present) by this deployer."""
        return frozenset(self._deployed)

    def deploy(self, resource: Path | Traversable, target_dir: str | Path = "") -> bool:
        """Copy *resource* into ``target_dir`` (relative to the deploy root).

        Returns True if the file was copied, False if the target already
        existed.

        Raises:
            FileNotFoundError: if *resource* does not exist.
        """
        if not resource.is_file():
            msg = f"Resource not found: {resource}"
            raise FileNotFoundError(msg)
        destination_dir = self.target_dir / target_dir
        target = destination_dir / resource.name
        if target in self._deployed or target.exists():
            self._deployed.add(target)
            logger.debug("Skipped existing resource %s", target)
            return False

        destination_dir.mkdir(parents=True, exist_ok=True)
        with resource.open("rb") as src, target.open("wb") as dst:
            shutil.copyfileobj(src, dst)
        self._deployed.add(target)
        logger.info("Deployed %s", target)
        return True

    def deploy_package_resource(self, package: str, name: str, target_dir: str | Path = "") -> bool:
        """Deploy the resource *name* shipped inside *package*."""
        return self.deploy(resources.files(package).joinpath(name), target_dir)


def deploy_control_resources(deployer: ResourceDeployer) -> None:
    """Deploy the stylesheet shared by the built-in controls."""
    deployer.deploy_package_resource("perch.resources", CONTROL_CSS, "perch")
