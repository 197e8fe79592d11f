"""
Unit tests for instance identity lookup.
"""

from unittest.mock import MagicMock

import pytest
import requests

from withebs.errors import IdentityUnresolvedError
from withebs.utils.metadata import resolve_instance_identity


def _response(text, status=200):
    resp = MagicMock()
    resp.text = text
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    return resp


def _session(instance_id="i-0123456789abcdef0", region="eu-west-1"):
    session = MagicMock()
    session.put.return_value = _response("token-abc")
    session.get.side_effect = [_response(instance_id), _response(region)]
    return session


def test_resolves_identity():
    session = _session()

    identity = resolve_instance_identity("http://169.254.169.254/", session=session)

    assert identity.instance_id == "i-0123456789abcdef0"
    assert identity.region == "eu-west-1"
    session.put.assert_called_once()
    assert session.put.call_args[0][0] == "http://169.254.169.254/latest/api/token"
    first_get = session.get.call_args_list[0]
    assert first_get[0][0] == "http://169.254.169.254/latest/meta-data/instance-id"
    assert first_get[1]["headers"] == {"X-aws-ec2-metadata-token": "token-abc"}


def test_unreachable_service():
    session = MagicMock()
    session.put.side_effect = requests.ConnectionError("no route to host")

    with pytest.raises(IdentityUnresolvedError, match="not running in EC2"):
        resolve_instance_identity(session=session)


def test_http_error():
    session = MagicMock()
    session.put.return_value = _response("", status=403)

    with pytest.raises(IdentityUnresolvedError):
        resolve_instance_identity(session=session)


def test_unknown_instance_id():
    with pytest.raises(IdentityUnresolvedError):
        resolve_instance_identity(session=_session(instance_id="unknown"))


def test_missing_region():
    with pytest.raises(IdentityUnresolvedError, match="region"):
        resolve_instance_identity(session=_session(region=""))
