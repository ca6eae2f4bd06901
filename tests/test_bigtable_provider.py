"""Tests for the Bigtable instance-administration provider."""

import pytest
from unittest.mock import Mock, patch

from google.api_core import exceptions as api_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud.bigtable import enums

from bigtable_broker.exceptions import ConfigurationError, ErrorCode, ProviderError
from bigtable_broker.providers.bigtable_provider import BigtableInstanceAdminProvider
from bigtable_broker.services.parameters import InstanceConfiguration, StorageType


@pytest.fixture
def instance_config():
    return InstanceConfiguration(
        name="mytable",
        cluster_id="mytable-cluster",
        num_nodes=3,
        storage_type=StorageType.SSD,
        zone="us-east1-b",
        display_name="My Table"
    )


@pytest.fixture
def client_factory(mock_bigtable_client):
    return Mock(return_value=mock_bigtable_client)


@pytest.fixture
def provider(client_factory):
    return BigtableInstanceAdminProvider(project_id="test-project", client_factory=client_factory)


class TestBigtableInstanceAdminProvider:
    """Test Bigtable provider."""

    def test_requires_project(self):
        with patch('bigtable_broker.providers.bigtable_provider.config') as mock_config:
            mock_config.gcp.project_id = None
            with pytest.raises(ConfigurationError):
                BigtableInstanceAdminProvider()

    def test_default_client(self):
        """The default client is an admin client for the broker's project."""
        with patch('bigtable_broker.providers.bigtable_provider.bigtable.Client') as client_cls:
            provider = BigtableInstanceAdminProvider(project_id="test-project", user_agent="test-agent")
            provider._admin_client()

        kwargs = client_cls.call_args.kwargs
        assert kwargs['project'] == "test-project"
        assert kwargs['admin'] is True
        assert kwargs['client_info'].user_agent == "test-agent"

    def test_create_instance(self, provider, client_factory, mock_bigtable_client, instance_config):
        provider.create_instance(instance_config)

        client_factory.assert_called_once_with()
        mock_bigtable_client.instance.assert_called_once_with(
            "mytable",
            display_name="My Table",
            instance_type=enums.Instance.Type.PRODUCTION
        )
        instance = mock_bigtable_client.instance.return_value
        instance.cluster.assert_called_once_with(
            "mytable-cluster",
            location_id="us-east1-b",
            serve_nodes=3,
            default_storage_type=enums.StorageType.SSD
        )
        instance.create.assert_called_once_with(clusters=[instance.cluster.return_value])
        instance.create.return_value.result.assert_called_once_with()

    def test_create_instance_hdd(self, provider, mock_bigtable_client, instance_config):
        hdd_config = InstanceConfiguration(
            name=instance_config.name,
            cluster_id=instance_config.cluster_id,
            num_nodes=1,
            storage_type=StorageType.HDD,
            zone=instance_config.zone,
            display_name=instance_config.display_name
        )

        provider.create_instance(hdd_config)

        cluster_kwargs = mock_bigtable_client.instance.return_value.cluster.call_args.kwargs
        assert cluster_kwargs['default_storage_type'] == enums.StorageType.HDD
        assert cluster_kwargs['serve_nodes'] == 1

    def test_create_instance_opens_fresh_client(self, provider, client_factory, instance_config):
        provider.create_instance(instance_config)
        provider.create_instance(instance_config)

        assert client_factory.call_count == 2

    def test_create_instance_api_error(self, provider, mock_bigtable_client, instance_config):
        operation = mock_bigtable_client.instance.return_value.create.return_value
        operation.result.side_effect = api_exceptions.AlreadyExists("Instance mytable already exists")

        with pytest.raises(ProviderError) as exc_info:
            provider.create_instance(instance_config)

        error = exc_info.value
        assert error.error_code == ErrorCode.PROVIDER_OPERATION_FAILED
        assert error.message.startswith("Error creating new instance:")
        assert "already exists" in error.message
        assert error.details == {'operation': 'create', 'instance_name': 'mytable'}
        assert isinstance(error.cause, api_exceptions.AlreadyExists)
        # Single attempt only
        operation.result.assert_called_once()

    def test_create_instance_request_error(self, provider, mock_bigtable_client, instance_config):
        instance = mock_bigtable_client.instance.return_value
        instance.create.side_effect = api_exceptions.PermissionDenied("caller lacks permission")

        with pytest.raises(ProviderError) as exc_info:
            provider.create_instance(instance_config)

        assert "caller lacks permission" in exc_info.value.message

    def test_client_creation_error(self, instance_config):
        factory = Mock(side_effect=auth_exceptions.DefaultCredentialsError("no credentials"))
        provider = BigtableInstanceAdminProvider(project_id="test-project", client_factory=factory)

        with pytest.raises(ProviderError) as exc_info:
            provider.create_instance(instance_config)

        assert exc_info.value.message.startswith("Error creating bigtable client:")

    def test_delete_instance(self, provider, mock_bigtable_client):
        provider.delete_instance("foo")

        mock_bigtable_client.instance.assert_called_once_with("foo")
        mock_bigtable_client.instance.return_value.delete.assert_called_once_with()

    def test_delete_instance_not_found(self, provider, mock_bigtable_client):
        mock_bigtable_client.instance.return_value.delete.side_effect = api_exceptions.NotFound("Instance foo not found")

        with pytest.raises(ProviderError) as exc_info:
            provider.delete_instance("foo")

        assert exc_info.value.message.startswith("Error deleting instance:")
        assert exc_info.value.details['instance_name'] == "foo"
