"""Synthetic ERP Connector Package.

Implements the ERPConnector interface against a seeded in-memory dataset.
"""

from connectors.synthetic.synthetic_connector import SyntheticConnector
from connectors.synthetic.synthetic_data import SyntheticDataset
from connectors.synthetic.synthetic_mappers import SYNTHETIC_ACL

__all__ = [
    "SyntheticConnector",
    "SyntheticDataset",
    "SYNTHETIC_ACL",
]
