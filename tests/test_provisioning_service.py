"""Tests for the Bigtable broker."""

import json
import pytest
from unittest.mock import AsyncMock, Mock, patch

from bigtable_broker.exceptions import (
    ErrorCode, InstanceNotFoundError, ParameterDecodeError, PlanConfigurationError, ProviderError
)
from bigtable_broker.models.factory import ServiceInstanceDetailsFactory
from bigtable_broker.models.instance import DeprovisionDetails
from bigtable_broker.services.parameters import InstanceConfiguration, StorageType
from bigtable_broker.services.provisioning import BigtableBroker


class TestBigtableBroker:
    """Test Bigtable broker."""

    @pytest.fixture
    def mock_store(self):
        """Mock instance record store."""
        store = AsyncMock()
        store.get_instance_details.return_value = None
        return store

    @pytest.fixture
    def mock_provider(self):
        """Mock instance-administration provider."""
        provider = Mock()
        provider.create_instance.return_value = None
        provider.delete_instance.return_value = None
        return provider

    @pytest.fixture
    def broker(self, mock_provider, mock_store, fixed_name_generator):
        return BigtableBroker(
            mock_provider, mock_store, generator=fixed_name_generator, default_zone="us-east1-b"
        )

    @pytest.fixture
    def ssd_plan(self):
        return ServiceInstanceDetailsFactory.create_plan_details(num_nodes="3", storage_type="SSD")

    @pytest.mark.asyncio
    async def test_provision_named_instance(self, broker, mock_provider, mock_store, ssd_plan):
        """Test provisioning with an explicit name."""
        details = ServiceInstanceDetailsFactory.create_provision_details('{"name":"mytable"}')

        instance = await broker.provision("instance-123", details, ssd_plan)

        mock_provider.create_instance.assert_called_once_with(InstanceConfiguration(
            name="mytable",
            cluster_id="mytable-cluster",
            num_nodes=3,
            storage_type=StorageType.SSD,
            zone="us-east1-b",
            display_name="mytable"
        ))
        assert instance.id == "instance-123"
        assert instance.name == "mytable"
        assert instance.url == ""
        assert instance.location == ""
        assert json.loads(instance.other_details) == {"instance_id": "mytable"}

        # The caller persists the record
        mock_store.save_instance_details.assert_not_called()

    @pytest.mark.asyncio
    async def test_provision_generated_name(self, broker, mock_provider, ssd_plan):
        details = ServiceInstanceDetailsFactory.create_provision_details("")

        instance = await broker.provision("instance-123", details, ssd_plan)

        assert instance.name == "brave-otter-a1b2c3"
        config = mock_provider.create_instance.call_args[0][0]
        assert config.cluster_id == "brave-otter-a1b2c3-cluster"

    @pytest.mark.asyncio
    async def test_provision_malformed_parameters(self, broker, mock_provider, ssd_plan):
        details = ServiceInstanceDetailsFactory.create_provision_details('{"name": ')

        with pytest.raises(ParameterDecodeError):
            await broker.provision("instance-123", details, ssd_plan)

        mock_provider.create_instance.assert_not_called()

    @pytest.mark.asyncio
    async def test_provision_invalid_num_nodes(self, broker, mock_provider):
        details = ServiceInstanceDetailsFactory.create_provision_details('{"name":"mytable"}')
        plan = ServiceInstanceDetailsFactory.create_plan_details(num_nodes="abc")

        with pytest.raises(PlanConfigurationError):
            await broker.provision("instance-123", details, plan)

        mock_provider.create_instance.assert_not_called()

    @pytest.mark.asyncio
    async def test_provision_provider_failure(self, broker, mock_provider, ssd_plan):
        mock_provider.create_instance.side_effect = ProviderError(
            "Error creating new instance: quota exceeded", operation="create"
        )
        details = ServiceInstanceDetailsFactory.create_provision_details('{"name":"mytable"}')

        with pytest.raises(ProviderError) as exc_info:
            await broker.provision("instance-123", details, ssd_plan)

        assert "quota exceeded" in exc_info.value.message
        mock_provider.create_instance.assert_called_once()

    @pytest.mark.asyncio
    async def test_deprovision_uses_stored_name(self, broker, mock_provider, mock_store):
        """The provider deletes the stored instance name, not the broker id."""
        mock_store.get_instance_details.return_value = ServiceInstanceDetailsFactory.create_default(
            "instance-123", name="foo"
        )

        await broker.deprovision("instance-123", DeprovisionDetails(service_id="svc", plan_id="plan"))

        mock_store.get_instance_details.assert_called_once_with("instance-123")
        mock_provider.delete_instance.assert_called_once_with("foo")
        # Removing the record is the caller's job
        mock_store.delete_instance_details.assert_not_called()

    @pytest.mark.asyncio
    async def test_deprovision_missing_instance(self, broker, mock_provider, mock_store):
        mock_store.get_instance_details.return_value = None

        with pytest.raises(InstanceNotFoundError):
            await broker.deprovision("missing", DeprovisionDetails(service_id="svc", plan_id="plan"))

        mock_provider.delete_instance.assert_not_called()

    @pytest.mark.asyncio
    async def test_deprovision_provider_failure(self, broker, mock_provider, mock_store):
        mock_store.get_instance_details.return_value = ServiceInstanceDetailsFactory.create_default(
            "instance-123", name="foo"
        )
        mock_provider.delete_instance.side_effect = ProviderError(
            "Error deleting instance: not found", operation="delete"
        )

        with pytest.raises(ProviderError):
            await broker.deprovision("instance-123", DeprovisionDetails(service_id="svc", plan_id="plan"))

    @pytest.mark.asyncio
    async def test_provision_failure_is_audited(self, broker, mock_provider, ssd_plan):
        mock_provider.create_instance.side_effect = ProviderError(
            "Error creating new instance: quota exceeded", operation="create", instance_name="mytable"
        )
        details = ServiceInstanceDetailsFactory.create_provision_details('{"name":"mytable"}')

        with patch('bigtable_broker.services.provisioning.audit_logger') as audit:
            with pytest.raises(ProviderError):
                await broker.provision("instance-123", details, ssd_plan, user_id="user-1")

        instance_id, operation, user_id, audit_details = audit.log_provisioning.call_args[0]
        assert (instance_id, operation, user_id) == ("instance-123", "provision_failed", "user-1")
        assert audit_details['error'] == ErrorCode.PROVIDER_OPERATION_FAILED.value
        assert audit_details['details'] == {'operation': 'create', 'instance_name': 'mytable'}

    @pytest.mark.asyncio
    async def test_deprovision_failure_is_audited(self, broker, mock_provider, mock_store):
        mock_store.get_instance_details.return_value = ServiceInstanceDetailsFactory.create_default(
            "instance-123", name="foo"
        )
        mock_provider.delete_instance.side_effect = ProviderError(
            "Error deleting instance: not found", operation="delete", instance_name="foo"
        )

        with patch('bigtable_broker.services.provisioning.audit_logger') as audit:
            with pytest.raises(ProviderError):
                await broker.deprovision("instance-123", DeprovisionDetails(service_id="svc", plan_id="plan"))

        _, operation, _, audit_details = audit.log_provisioning.call_args[0]
        assert operation == "deprovision_failed"
        assert audit_details['message'] == "Error deleting instance: not found"
        assert audit_details['details']['instance_name'] == "foo"
