"""
Shared test fixtures and utilities.
"""
import os
import pytest
import boto3
from moto import mock_aws
from amu_api.core.config import DEFAULT_REFERENCE_DATA_PATH
from amu_api.repositories.reference_repository import load_reference_data
from amu_api.services.withdrawal_calculator import WithdrawalCalculator

TREATMENTS_TABLE = 'Treatments-test'


@pytest.fixture(scope="session")
def reference_repository():
    """Reference repository loaded from the bundled seed file."""
    return load_reference_data(DEFAULT_REFERENCE_DATA_PATH)


@pytest.fixture
def calculator(reference_repository):
    """WithdrawalCalculator over the bundled reference table."""
    return WithdrawalCalculator(reference_repository)


@pytest.fixture
def aws_env():
    """Mock AWS credentials and table names for moto-backed tests."""
    os.environ['AWS_ACCESS_KEY_ID'] = 'testing'
    os.environ['AWS_SECRET_ACCESS_KEY'] = 'testing'
    os.environ['AWS_SECURITY_TOKEN'] = 'testing'
    os.environ['AWS_SESSION_TOKEN'] = 'testing'
    os.environ['AWS_REGION'] = 'us-east-1'
    os.environ['TREATMENTS_TABLE_NAME'] = TREATMENTS_TABLE
    os.environ['ENVIRONMENT'] = 'test'

    from amu_api.core import dependencies
    dependencies.clear_caches()

    yield

    for key in ['TREATMENTS_TABLE_NAME', 'ENVIRONMENT']:
        if key in os.environ:
            del os.environ[key]
    dependencies.clear_caches()


@pytest.fixture
def treatments_table(aws_env):
    """Moto-backed treatments table with settings reloaded inside the mock."""
    with mock_aws():
        from amu_api.core import config
        config.settings = config.Settings()

        dynamodb = boto3.resource('dynamodb', region_name='us-east-1')
        table = dynamodb.create_table(
            TableName=TREATMENTS_TABLE,
            KeySchema=[{'AttributeName': 'entry_id', 'KeyType': 'HASH'}],
            AttributeDefinitions=[{'AttributeName': 'entry_id', 'AttributeType': 'S'}],
            BillingMode='PAY_PER_REQUEST'
        )
        yield table
