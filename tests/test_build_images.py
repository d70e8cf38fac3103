import subprocess
from pathlib import Path
from unittest import mock

import pytest

from dockertestkit.build_images import (
    ImageBuildError,
    build_image,
    build_test_images,
    main,
)


def _done(returncode=0, stderr=b""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=b"", stderr=stderr)


@mock.patch("dockertestkit.build_images.subprocess.run")
def test_build_runs_docker_build_command(run, tmp_path):
    run.return_value = _done()
    tags = build_test_images(tmp_path)
    assert tags[0] == "no_expose_port:latest"
    command = run.call_args_list[0].args[0]
    assert command == [
        "docker",
        "build",
        "--file",
        str(tmp_path / "src" / "dockerfiles" / "no_expose_port.dockerfile"),
        "--force-rm",
        "--tag",
        "no_expose_port:latest",
        str(tmp_path),
    ]


@mock.patch("dockertestkit.build_images.subprocess.run")
def test_build_image_failure_reports_stderr(run, capsys):
    run.return_value = _done(returncode=1, stderr=b"boom")
    with pytest.raises(ImageBuildError, match="unable to build demo:latest"):
        build_image("Dockerfile", "demo:latest", ".")
    assert "stderr: boom" in capsys.readouterr().err


@mock.patch("dockertestkit.build_images.subprocess.run")
def test_missing_docker_raises_build_error(run):
    run.side_effect = FileNotFoundError("docker")
    with pytest.raises(ImageBuildError):
        build_image("Dockerfile", "demo:latest", ".")


@mock.patch("dockertestkit.build_images.subprocess.run")
def test_build_test_images_builds_both_in_order(run, tmp_path):
    run.return_value = _done()
    tags = build_test_images(tmp_path)
    assert tags == ["no_expose_port:latest", "simple_web_server:latest"]
    files = [call.args[0][3] for call in run.call_args_list]
    assert files == [
        str(tmp_path / "src" / "dockerfiles" / "no_expose_port.dockerfile"),
        str(tmp_path / "src" / "dockerfiles" / "simple_web_server.dockerfile"),
    ]
    contexts = {call.args[0][-1] for call in run.call_args_list}
    assert contexts == {str(Path(tmp_path))}


@mock.patch("dockertestkit.build_images.subprocess.run")
def test_build_test_images_stops_at_first_failure(run, tmp_path):
    run.return_value = _done(returncode=1)
    with pytest.raises(ImageBuildError, match="unable to build no_expose_port:latest"):
        build_test_images(tmp_path)
    assert run.call_count == 1


@mock.patch("dockertestkit.build_images.subprocess.run")
def test_main_returns_zero_on_success(run, tmp_path, capsys):
    run.return_value = _done()
    assert main([str(tmp_path)]) == 0
    err = capsys.readouterr().err
    assert "Built no_expose_port:latest" in err
    assert "Built simple_web_server:latest" in err


@mock.patch("dockertestkit.build_images.subprocess.run")
def test_main_returns_one_on_failure(run, tmp_path):
    run.return_value = _done(returncode=1)
    assert main([str(tmp_path)]) == 1