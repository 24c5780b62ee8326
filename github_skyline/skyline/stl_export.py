from __future__ import annotations

import logging
import os
import subprocess
import tempfile
import time
from pathlib import Path
from typing import Optional

from .errors import ExternalToolError, WriteError

logger = logging.getLogger(__name__)


def _stderr_tail(text: str, lines: int = 20) -> str:
    return "\n".join((text or "").strip().splitlines()[-lines:])


def export_stl(
    scad_text: str,
    output_path: Path,
    *,
    openscad_path: str = "openscad",
    timeout: Optional[float] = None,
) -> bytes:
    """
    Compile an OpenSCAD program into a mesh with `openscad -o <output> <program>`.

    The program is written to a temporary `.scad` file that is removed on every exit path. The
    exit status is the only success signal; the mesh bytes are read back from `output_path`.
    """

    output_path = Path(output_path)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise WriteError(output_path, exc.strerror or str(exc)) from exc

    fd, tmp_name = tempfile.mkstemp(prefix="skyline", suffix=".scad")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as handle:
            handle.write(scad_text)

        cmd = [openscad_path, "-o", str(output_path), tmp_name]
        logger.info("Running %s", " ".join(cmd))
        start = time.monotonic()
        try:
            proc = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
        except FileNotFoundError as exc:
            raise ExternalToolError(f"OpenSCAD executable not found: {openscad_path}") from exc
        except subprocess.TimeoutExpired as exc:
            stderr = exc.stderr.decode("utf-8", "replace") if isinstance(exc.stderr, bytes) else (exc.stderr or "")
            raise ExternalToolError(
                f"{openscad_path} timed out after {timeout}s while writing {output_path}",
                stderr=_stderr_tail(stderr),
            ) from exc

        if proc.returncode != 0:
            stderr = _stderr_tail(proc.stderr or proc.stdout or "")
            raise ExternalToolError(
                f"{openscad_path} exited with {proc.returncode} while writing {output_path}"
                + (f":\n{stderr}" if stderr else ""),
                returncode=proc.returncode,
                stderr=stderr,
            )
        logger.info("STL written to %s in %.2fs", output_path, time.monotonic() - start)
    finally:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)

    try:
        return output_path.read_bytes()
    except OSError as exc:
        raise ExternalToolError(f"{openscad_path} reported success but {output_path} is unreadable: {exc}") from exc
