#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Instance identity lookup for withebs.
Reads the instance ID and region from the EC2 instance metadata service (IMDSv2).
"""
import logging

import requests

from withebs.errors import IdentityUnresolvedError
from withebs.models import InstanceIdentity

logger = logging.getLogger("withebs")

TOKEN_PATH = "/latest/api/token"
INSTANCE_ID_PATH = "/latest/meta-data/instance-id"
REGION_PATH = "/latest/meta-data/placement/region"
TOKEN_TTL_SECONDS = "60"


def _get(session: requests.Session, url: str, token: str, timeout: float) -> str:
    resp = session.get(url, headers={"X-aws-ec2-metadata-token": token}, timeout=timeout)
    resp.raise_for_status()
    return resp.text.strip()


def resolve_instance_identity(base_url: str = "http://169.254.169.254", timeout: float = 2.0, session=None) -> InstanceIdentity:
    """Return this instance's identity or raise IdentityUnresolvedError."""
    session = session or requests.Session()
    base = base_url.rstrip("/")
    try:
        token_resp = session.put(
            f"{base}{TOKEN_PATH}",
            headers={"X-aws-ec2-metadata-token-ttl-seconds": TOKEN_TTL_SECONDS},
            timeout=timeout,
        )
        token_resp.raise_for_status()
        token = token_resp.text.strip()
        instance_id = _get(session, f"{base}{INSTANCE_ID_PATH}", token, timeout)
        region = _get(session, f"{base}{REGION_PATH}", token, timeout)
    except requests.RequestException as e:
        raise IdentityUnresolvedError(f"cannot determine AWS instance ID. not running in EC2? ({e})") from e
    if not instance_id or instance_id == "unknown":
        raise IdentityUnresolvedError("cannot determine AWS instance ID. not running in EC2?")
    if not region:
        raise IdentityUnresolvedError(f"cannot determine AWS region for instance {instance_id}")
    logger.info("running on instance %s in %s", instance_id, region)
    return InstanceIdentity(instance_id=instance_id, region=region)
