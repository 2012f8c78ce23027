"""Tests for the bot CLI."""

from __future__ import annotations

import base64
import json
from unittest.mock import patch
from urllib.parse import parse_qs, urlparse

from click.testing import CliRunner

from src.bot import links
from src.models import ProductView
from src.server.cli import cli
from tests.conftest import make_product

FULL_ENV = {
    "PAGE_ACCESS_TOKEN": "page",
    "VERIFY_TOKEN": "verify",
    "SMBMKT_BACKEND_URL": "https://backend.test",
    "BOT_ROOT_URL": "https://bot.test",
}


def test_check_config_complete() -> None:
    result = CliRunner().invoke(cli, ["check-config"], env=FULL_ENV)
    assert result.exit_code == 0
    assert "Configuration complete" in result.output


def test_check_config_reports_missing() -> None:
    env = {**FULL_ENV, "VERIFY_TOKEN": ""}
    result = CliRunner().invoke(cli, ["check-config"], env=env)
    assert result.exit_code == 1
    assert "Missing: VERIFY_TOKEN" in result.output


def test_encode_link_prints_product_url() -> None:
    product = make_product()
    result = CliRunner().invoke(cli, ["encode-link", json.dumps(product.to_wire())], env=FULL_ENV)
    assert result.exit_code == 0
    url = result.output.strip()
    assert url.startswith("https://bot.test/web/Products?data=")
    data = parse_qs(urlparse(url).query)["data"][0]
    assert json.loads(base64.b64decode(data))["selectedProduct"]["productid"] == "HT-1000"


def test_encode_link_rejects_bad_json() -> None:
    result = CliRunner().invoke(cli, ["encode-link", "{bad"], env=FULL_ENV)
    assert result.exit_code != 0


def test_decode_link_prints_page_data() -> None:
    selected = make_product(productid="A")
    other = make_product(productid="B")
    data = links.encode_data(ProductView(selected_product=selected, similar_products=[selected, other]))
    result = CliRunner().invoke(cli, ["decode-link", data], env=FULL_ENV)
    assert result.exit_code == 0
    page = json.loads(result.output)
    assert page["selectedProduct"]["productid"] == "A"
    assert [p["productid"] for p in page["similarProducts"]] == ["B"]


def test_serve_runs_uvicorn_factory() -> None:
    with patch("src.server.cli.uvicorn.run") as mock_run:
        result = CliRunner().invoke(cli, ["serve", "--port", "9000"], env=FULL_ENV)
    assert result.exit_code == 0
    mock_run.assert_called_once_with(
        "src.server.app:create_app_from_env", factory=True, host="0.0.0.0", port=9000,
    )
