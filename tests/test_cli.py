import json
from unittest.mock import MagicMock, patch

import pytest
from requests.exceptions import ConnectionError as RequestsConnectionError

from interface import cli


def _response(status, content=b"", body=None):
    resp = MagicMock()
    resp.status_code = status
    resp.content = content
    resp.text = json.dumps(body) if body is not None else ""
    resp.json.return_value = body or {}
    return resp


def test_cli_saves_image(tmp_path):
    params_path = tmp_path / "params.json"
    params_path.write_text(json.dumps({"city": {"width": 200}}))
    with patch("interface.cli.requests.post", return_value=_response(200, b"\xff\xd8data")) as post:
        path = cli.main([
            "--api", "http://localhost:5000/",
            "--params", str(params_path),
            "--outdir", str(tmp_path / "out"),
        ])
    url = post.call_args.args[0]
    assert url == "http://localhost:5000/generate"
    assert post.call_args.kwargs["json"] == {"params": {"city": {"width": 200}}, "format": "jpeg"}
    assert path.endswith("city.jpg")
    assert (tmp_path / "out" / "city.jpg").read_bytes() == b"\xff\xd8data"


def test_cli_png_extension(tmp_path):
    with patch("interface.cli.requests.post", return_value=_response(200, b"\x89PNG")):
        path = cli.main(["--outdir", str(tmp_path), "--format", "png"])
    assert path.endswith("city.png")


def test_cli_exits_on_error_status(tmp_path):
    body = {"code": "overloaded", "error": "Server is overloaded, please try again later."}
    with patch("interface.cli.requests.post", return_value=_response(503, body=body)):
        with pytest.raises(SystemExit) as info:
            cli.main(["--outdir", str(tmp_path)])
    assert info.value.code == 1
    assert not (tmp_path / "city.jpg").exists()


def test_cli_exits_when_service_unreachable(tmp_path):
    with patch("interface.cli.requests.post", side_effect=RequestsConnectionError("refused")):
        with pytest.raises(SystemExit) as info:
            cli.main(["--outdir", str(tmp_path)])
    assert info.value.code == 1
