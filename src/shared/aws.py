"""boto3 session helpers shared by the AWS wrappers."""

import os
from typing import Any, Dict, Optional

import boto3


def endpoint_kwargs(region_name: Optional[str] = None) -> Dict[str, Any]:
    """
    Keyword arguments for boto3.client / boto3.resource.

    When USE_LOCALSTACK is true and LOCALSTACK_ENDPOINT is set, every
    service is pointed at LocalStack.
    """
    kwargs: Dict[str, Any] = {'region_name': region_name}

    endpoint_url = os.environ.get('LOCALSTACK_ENDPOINT')
    if endpoint_url and os.environ.get('USE_LOCALSTACK', 'false').lower() == 'true':
        kwargs['endpoint_url'] = endpoint_url

    return kwargs


def client(service_name: str, region_name: Optional[str] = None):
    """Low-level client for an AWS service."""
    return boto3.client(service_name, **endpoint_kwargs(region_name))


def resource(service_name: str, region_name: Optional[str] = None):
    """Resource interface for an AWS service."""
    return boto3.resource(service_name, **endpoint_kwargs(region_name))
