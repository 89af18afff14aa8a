#!/usr/bin/env python3
"""
utils/session.py

Session management utilities for AWS interactions.

Builds boto3 sessions from the access configuration: assumed role, static
keys, named profile or the default credential chain.
"""

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from typing import Optional
from .config import AccessConfig
from .exceptions import SessionError
from .logger import setup_logger

logger = setup_logger(__name__, "session.log")


def assume_role(
    role_arn: str,
    role_session_name: str = "ebstpm",
    region: Optional[str] = None,
    base_session: Optional[boto3.Session] = None,
) -> boto3.Session:
    """Assumes a role and returns a boto3 Session holding the temporary credentials."""
    base_session = base_session or boto3.Session(region_name=region)

    try:
        sts_client = base_session.client("sts", region_name=region)
        response = sts_client.assume_role(
            RoleArn=role_arn, RoleSessionName=role_session_name
        )
        credentials = response["Credentials"]

        return boto3.Session(
            aws_access_key_id=credentials["AccessKeyId"],
            aws_secret_access_key=credentials["SecretAccessKey"],
            aws_session_token=credentials["SessionToken"],
            region_name=region,
        )
    except ClientError as e:
        error_code = e.response["Error"]["Code"]
        raise SessionError(f"Failed to assume role {role_arn}: {error_code} - {e}") from e
    except BotoCoreError as e:
        raise SessionError(f"Unexpected error assuming role {role_arn}: {e}") from e


class SessionManager:
    """Manages AWS sessions for role assumption and credential handling."""

    @classmethod
    def get_session(cls, access: AccessConfig) -> boto3.Session:
        """Create a boto3 Session for the given access configuration.

        Raises SessionError when the session cannot be built or, unless
        skip_credential_validation is set, when no credentials resolve.
        """
        try:
            if access.has_static_credentials:
                session = boto3.Session(
                    aws_access_key_id=access.access_key,
                    aws_secret_access_key=access.secret_key,
                    aws_session_token=access.token,
                    region_name=access.region,
                )
            else:
                session = boto3.Session(
                    profile_name=access.profile, region_name=access.region
                )
        except BotoCoreError as e:
            raise SessionError(f"Failed to create AWS session: {e}") from e

        if access.role_arn:
            logger.info(f"Assuming role {access.role_arn}")
            session = assume_role(
                access.role_arn,
                access.role_session_name,
                region=access.region,
                base_session=session,
            )

        if not access.skip_credential_validation and session.get_credentials() is None:
            raise SessionError(
                "No AWS credentials found. Configure a profile, static keys "
                "or the default credential chain."
            )

        return session

    @classmethod
    def get_client(cls, session: boto3.Session, service: str, region: str):
        """Create a region-scoped client from an existing session."""
        try:
            return session.client(service, region_name=region)
        except BotoCoreError as e:
            raise SessionError(f"Failed to create {service} client for {region}: {e}") from e
