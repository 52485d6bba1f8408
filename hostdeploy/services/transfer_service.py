"""
Artifact Transfer Service

Mirrors the local working copy to the fixed remote directory. rsync is
preferred (delta transfer, deletions mirrored); scp is the fallback and
replaces the remote directory wholesale so both paths end in the same
state.
"""

import shutil
from pathlib import Path
from typing import Optional

from hostdeploy.exceptions import TransferError
from hostdeploy.logger import DeployLogger
from hostdeploy.services.commands import SyncCommands, SystemCommands
from hostdeploy.services.local_service import LocalRunner
from hostdeploy.services.ssh_service import SSHService


class TransferService:
    """Copies the working copy to ~/<remote_dir> on the remote host."""

    def __init__(
        self,
        ssh: SSHService,
        logger: DeployLogger,
        remote_dir: str,
        runner: Optional[LocalRunner] = None,
    ):
        self.ssh = ssh
        self.logger = logger
        self.remote_dir = remote_dir
        self.runner = runner or LocalRunner(logger)

    @property
    def destination(self) -> str:
        return f"{self.ssh.config.destination}:{self.remote_dir}"

    def rsync_available(self) -> bool:
        if shutil.which("rsync") is None:
            return False
        return self.ssh.execute(SystemCommands.command_exists("rsync")).is_success

    def transfer(self, working_copy: Path) -> str:
        """
        Mirror working_copy to the remote directory.

        Returns:
            Name of the mechanism used ('rsync' or 'scp')

        Raises:
            TransferError: If no mechanism succeeds
        """
        if self.rsync_available():
            result = self.runner.run(
                SyncCommands.rsync(str(working_copy), self.destination, self.ssh.config.ssh_options),
                description="Syncing files (rsync)",
            )
            if result.is_success:
                self.logger.success(f"Files synced to ~/{self.remote_dir} (rsync)")
                return "rsync"
            self.logger.warning("rsync failed, falling back to scp")
        else:
            self.logger.info("rsync unavailable, using scp")

        return self._copy_full(working_copy)

    def _copy_full(self, working_copy: Path) -> str:
        cleared = self.ssh.execute(SystemCommands.remove_tree(self.remote_dir))
        if cleared.is_failure:
            raise TransferError(
                f"Could not clear ~/{self.remote_dir} before copying",
                context=cleared.output,
            )

        # Target does not exist, so scp -r creates it with the directory's contents
        result = self.runner.run(
            SyncCommands.scp(str(working_copy), self.destination, self.ssh.config.ssh_options),
            description="Copying files (scp)",
        )
        if result.is_failure:
            raise TransferError("File transfer failed", context=result.output)

        self.logger.success(f"Files copied to ~/{self.remote_dir} (scp)")
        return "scp"
