"""
Packaging command invocation.

Runs the external packaging tool that writes the platform installers into
the dist directory. The command is run synchronously; any failure aborts
the release.
"""

import logging
import shlex
import shutil
import subprocess
from pathlib import Path
from typing import Optional, Union

from release_publisher.errors import PackagingError


logger = logging.getLogger("release_publisher.packager")


def run_packager(command: Union[str, list[str]], cwd: Optional[Path] = None) -> None:
    """
    Run the packaging command and wait for it to finish.

    Output is streamed to the parent process so CI logs show packager progress.

    Args:
        command: Command line as a string or argument list
        cwd: Working directory for the command

    Raises:
        PackagingError: If the command cannot be started or exits non-zero
    """
    args = shlex.split(command) if isinstance(command, str) else list(command)
    if not args:
        raise PackagingError("Packaging command is empty")

    # yarn is a .cmd wrapper on Windows
    executable = shutil.which(args[0])
    if executable:
        args[0] = executable

    logger.info(f"Packaging release: {' '.join(args)}")

    try:
        subprocess.run(args, cwd=cwd, check=True)
    except FileNotFoundError as e:
        raise PackagingError(f"Packaging command not found: {args[0]} ({e})")
    except subprocess.CalledProcessError as e:
        raise PackagingError(
            f"Packaging command failed with exit code {e.returncode}",
            returncode=e.returncode,
        )

    logger.info("Packaging complete")
