"""Temporal client connection factory.

Handles the two connection modes transparently:

1. **Local dev**: Connect to `localhost:7233`: the Temporal dev server started
   by `temporal server start-dev`. No auth needed.

2. **Temporal Cloud**: Connect using TEMPORAL_REGIONAL_ENDPOINT, TEMPORAL_NAMESPACE,
   and TEMPORAL_API_KEY environment variables. Uses API key authentication with TLS.

   Temporal Cloud requires the **regional endpoint**
   (e.g., `us-east-1.aws.api.temporal.io:7233`), not the namespace endpoint.

Both modes use the Pydantic data converter: every activity and workflow in the
platform takes and returns Pydantic models (with datetimes), which the default
JSON converter cannot round-trip.
"""

import os

from temporalio.client import Client
from temporalio.contrib.pydantic import pydantic_data_converter


async def connect() -> Client:
    """Create a connected Temporal client.

    Checks for TEMPORAL_API_KEY in the environment to decide the mode:
    - If set, connects to Temporal Cloud via the regional endpoint with TLS.
    - If unset, connects to TEMPORAL_ADDRESS (default localhost:7233).
    """
    namespace = os.environ.get("TEMPORAL_NAMESPACE", "default")
    api_key = os.environ.get("TEMPORAL_API_KEY")

    if api_key:
        address = os.environ.get("TEMPORAL_REGIONAL_ENDPOINT")
        if not address:
            raise ValueError(
                "TEMPORAL_API_KEY is set but TEMPORAL_REGIONAL_ENDPOINT is missing. "
                "Set it to the regional endpoint from the Temporal Cloud 'Connect' dialog "
                "(e.g., us-east-1.aws.api.temporal.io:7233)."
            )
        # Do not add rpc_metadata here, it interferes with API key authentication.
        return await Client.connect(
            address,
            namespace=namespace,
            api_key=api_key,
            tls=True,
            data_converter=pydantic_data_converter,
        )

    address = os.environ.get("TEMPORAL_ADDRESS", "localhost:7233")
    return await Client.connect(
        address, namespace=namespace, data_converter=pydantic_data_converter
    )
