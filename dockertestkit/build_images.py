"""Build the Docker images the integration tests run against."""

from __future__ import annotations

import argparse
import subprocess
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Optional, Union

PathLike = Union[str, Path]

TEST_IMAGES: tuple[tuple[str, str], ...] = (
    ("no_expose_port.dockerfile", "no_expose_port:latest"),
    ("simple_web_server.dockerfile", "simple_web_server:latest"),
)
DOCKERFILES_DIR = Path("src") / "dockerfiles"


class ImageBuildError(RuntimeError):
    """A docker build failed or could not be run."""


def build_image(dockerfile: PathLike, tag: str, context: PathLike) -> None:
    """Run ``docker build`` for one image; raise ImageBuildError on failure."""
    command = [
        "docker",
        "build",
        "--file",
        str(dockerfile),
        "--force-rm",
        "--tag",
        tag,
        str(context),
    ]
    try:
        result = subprocess.run(command, capture_output=True, check=False)
    except OSError as exc:
        raise ImageBuildError(f"unable to build {tag}: {exc}") from exc
    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", errors="replace") if result.stderr else ""
        print(f"stderr: {stderr}", file=sys.stderr)
        raise ImageBuildError(f"unable to build {tag}")
    print(f"Built {tag}", file=sys.stderr)


def build_test_images(root: PathLike) -> list[str]:
    """Build every test image from ``root``; return the tags, in build order."""
    root = Path(root)
    built = []
    for dockerfile, tag in TEST_IMAGES:
        build_image(root / DOCKERFILES_DIR / dockerfile, tag, root)
        built.append(tag)
    return built


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Build the test images; exit status 1 if a build fails."""
    parser = argparse.ArgumentParser(description="Build the test images.")
    parser.add_argument("root", nargs="?", default=".", help="directory holding src/dockerfiles")
    args = parser.parse_args(argv)
    try:
        build_test_images(args.root)
    except ImageBuildError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())