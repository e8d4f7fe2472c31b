# crbh/core/command_utils.py
import subprocess
import logging
import time
import random
from typing import List, Optional, Union

logger = logging.getLogger("crbh.command_utils")


def run_command_with_retry(
    cmd: Union[List[str], str],
    max_retries: int = 0,
    retry_delay: float = 2.0,
    retry_backoff: float = 2.0,
    retry_jitter: float = 0.5,
    timeout: Optional[float] = None,
    check: bool = True,
    **kwargs
) -> subprocess.CompletedProcess:
    """Run a command with retry logic

    Args:
        cmd: Command to run (list of strings or string)
        max_retries: Maximum number of retries
        retry_delay: Initial delay between retries in seconds
        retry_backoff: Backoff multiplier for retry delay
        retry_jitter: Random jitter added to retry delay
        timeout: Command timeout in seconds
        check: Whether to check for non-zero return code
        **kwargs: Additional arguments for subprocess.run

    Returns:
        CompletedProcess object

    Raises:
        subprocess.CalledProcessError: If command fails after all retries
        subprocess.TimeoutExpired: If the last attempt timed out
    """
    cmd_str = cmd if isinstance(cmd, str) else ' '.join(cmd)
    logger.debug(f"Running command: {cmd_str}")

    retry_count = 0
    current_delay = retry_delay

    while True:
        try:
            logger.debug(f"Attempt {retry_count + 1}/{max_retries + 1}: {cmd_str}")
            return subprocess.run(
                cmd,
                text=True,
                capture_output=True,
                timeout=timeout,
                check=check,
                **kwargs
            )
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired) as error:
            retry_count += 1

            if retry_count > max_retries:
                logger.error(f"Command failed after {max_retries + 1} attempts: {cmd_str}")
                logger.error(f"Last error: {str(error)}")
                if getattr(error, 'stderr', None):
                    logger.error(f"Stderr: {error.stderr}")
                raise

            actual_delay = current_delay + random.uniform(0, retry_jitter)
            logger.warning(f"Command failed (attempt {retry_count}/{max_retries + 1}), "
                           f"retrying in {actual_delay:.2f}s: {cmd_str}")
            time.sleep(actual_delay)
            current_delay *= retry_backoff


def locate_command(command: str) -> Optional[str]:
    """Return the full path of a command on the system path, or None"""
    try:
        result = subprocess.run(
            ["which", command],
            text=True,
            capture_output=True,
            check=False
        )
    except OSError:
        return None
    if result.returncode != 0 or not result.stdout.strip():
        return None
    return result.stdout.strip().splitlines()[0]

