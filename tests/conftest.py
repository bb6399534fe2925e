"""
Pytest configuration and fixtures for all tests.
"""

import os
import sys
import pytest
from unittest.mock import Mock

# Add src to Python path before any imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

# Set up test environment variables before importing any modules
os.environ.setdefault('AWS_DEFAULT_REGION', 'us-west-2')
os.environ.setdefault('ENVIRONMENT', 'test')
os.environ.setdefault('LOG_LEVEL', 'INFO')
os.environ.setdefault('MAIL_TRANSPORT', 'ses')
os.environ.setdefault('MAIL_CHECK_DNS', 'false')


@pytest.fixture
def transport():
    """Transport double that accepts every delivery."""
    mock_transport = Mock()
    mock_transport.send.return_value = True
    return mock_transport


@pytest.fixture
def resolver():
    """DomainResolver double that knows every domain."""
    mock_resolver = Mock()
    mock_resolver.has_mx_or_a.return_value = True
    return mock_resolver
