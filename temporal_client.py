"""Temporal client factory.

Creates connections to a Temporal server (local dev server or Temporal Cloud)
using settings from the environment.
"""

import os
import ssl
from pathlib import Path
from typing import Optional

# Load .env file if it exists
from dotenv import load_dotenv
env_path = Path(__file__).resolve().parent / ".env"
if env_path.exists():
    load_dotenv(env_path)

from temporalio.client import Client


async def get_temporal_client() -> Client:
    """Create and return a Temporal client.

    Reads configuration from environment variables:
    - TEMPORAL_ADDRESS: Server address (default "localhost:7233")
    - TEMPORAL_NAMESPACE: Namespace (default "default")
    - TEMPORAL_API_KEY: API key for Temporal Cloud (enables TLS)
    - TEMPORAL_CERT_PATH: Client certificate chain for mTLS (optional)

    Returns:
        Connected Temporal client
    """
    address = os.getenv("TEMPORAL_ADDRESS", "localhost:7233")
    namespace = os.getenv("TEMPORAL_NAMESPACE", "default")
    api_key = os.getenv("TEMPORAL_API_KEY")
    cert_path = os.getenv("TEMPORAL_CERT_PATH")

    # Local dev server: plaintext, no credentials
    if not api_key and not cert_path:
        return await Client.connect(address, namespace=namespace)

    tls_config: Optional[ssl.SSLContext] = ssl.create_default_context()
    if cert_path:
        tls_config.load_cert_chain(cert_path)

    return await Client.connect(
        address,
        namespace=namespace,
        tls=tls_config,
        api_key=api_key,
    )
