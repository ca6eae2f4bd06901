"""Open Service Broker API implementation."""

import asyncio
import json
import logging
from functools import wraps
from typing import Optional

from flask import Flask, request, jsonify
from pydantic import ValidationError as PydanticValidationError

from bigtable_broker import __version__
from bigtable_broker.auth.decorators import broker_auth_required
from bigtable_broker.config import config
from bigtable_broker.exceptions import (
    BrokerError, InstanceAlreadyExistsError, InstanceNotFoundError, ProviderError, ValidationError
)
from bigtable_broker.models.factory import BIGTABLE_SERVICE_ID, ServiceBrokerFactory
from bigtable_broker.models.instance import DeprovisionDetails, ProvisionDetails
from bigtable_broker.models.service_broker import (
    DeprovisionResponse, ErrorResponse, ProvisionRequest, ProvisionResponse
)
from bigtable_broker.providers.bigtable_provider import BigtableInstanceAdminProvider
from bigtable_broker.services.provisioning import BigtableBroker
from bigtable_broker.storage.factory import close_stores, get_instance_store

logger = logging.getLogger(__name__)

# Global broker instance, created on first use
_broker: Optional[BigtableBroker] = None


async def get_broker() -> BigtableBroker:
    """Get or create the Bigtable broker."""
    global _broker
    if _broker is None:
        store = await get_instance_store()
        _broker = BigtableBroker(BigtableInstanceAdminProvider(), store)
        logger.info("Bigtable broker initialized")
    return _broker


def async_route(f):
    """Decorator to handle async routes in Flask."""
    @wraps(f)
    def wrapper(*args, **kwargs):
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            return loop.run_until_complete(f(*args, **kwargs))
        finally:
            loop.close()
    return wrapper


def error_response(error: str, description: str, status: int):
    return jsonify(ErrorResponse(error=error, description=description).model_dump()), status


def create_app() -> Flask:
    """Create Flask application with OSB API routes."""
    app = Flask(__name__)

    if config.api.enable_cors:
        from flask_cors import CORS
        CORS(app)

    @app.route('/v2/catalog', methods=['GET'])
    @broker_auth_required
    def get_catalog():
        """Get service catalog."""
        try:
            catalog = ServiceBrokerFactory.create_catalog()
        except BrokerError as e:
            logger.error(f"Failed to get catalog: {e}")
            return error_response("InternalError", "Failed to retrieve service catalog", 500)
        return jsonify(catalog.model_dump(exclude_none=True))

    @app.route('/v2/service_instances/<instance_id>', methods=['PUT'])
    @broker_auth_required
    @async_route
    async def provision_service_instance(instance_id: str):
        """Provision a service instance."""
        data = request.get_json(silent=True)
        if not data or not isinstance(data, dict):
            return error_response("BadRequest", "Request body is required", 400)

        try:
            provision_request = ProvisionRequest(**data)
        except PydanticValidationError as e:
            return error_response("BadRequest", f"Invalid request format: {e}", 400)

        if provision_request.service_id != BIGTABLE_SERVICE_ID:
            return error_response("BadRequest", "Invalid service ID", 400)

        try:
            plan = ServiceBrokerFactory.find_plan(provision_request.plan_id)
        except BrokerError as e:
            logger.error(f"Failed to load plans: {e}")
            return error_response("InternalError", "Failed to load service plans", 500)
        if plan is None:
            return error_response("BadRequest", "Invalid plan ID", 400)

        user_id = request.headers.get('X-Broker-API-Originating-Identity')

        try:
            broker = await get_broker()

            if await broker.store.instance_exists(instance_id):
                return error_response("Conflict", "Service instance already exists", 409)

            details = ProvisionDetails(
                service_id=provision_request.service_id,
                plan_id=provision_request.plan_id,
                organization_guid=provision_request.organization_guid,
                space_guid=provision_request.space_guid,
                raw_parameters=json.dumps(provision_request.parameters) if provision_request.parameters else ""
            )

            instance = await broker.provision(instance_id, details, plan, user_id=user_id)
            await broker.store.save_instance_details(instance)

        except ValidationError as e:
            return error_response("BadRequest", e.message, 400)
        except InstanceAlreadyExistsError:
            return error_response("Conflict", "Service instance already exists", 409)
        except ProviderError as e:
            logger.error(f"Provisioning failed for {instance_id}: {e}")
            return error_response("InternalError", e.message, 500)
        except BrokerError as e:
            logger.error(f"Provision request failed: {e}")
            return error_response("InternalError", e.message, 500)

        return jsonify(ProvisionResponse().model_dump(exclude_none=True)), 201

    @app.route('/v2/service_instances/<instance_id>', methods=['PATCH'])
    @broker_auth_required
    def update_service_instance(instance_id: str):
        """Plan and parameter updates are not supported."""
        return error_response("NotSupported", "Service instance updates are not supported", 422)

    @app.route('/v2/service_instances/<instance_id>', methods=['DELETE'])
    @broker_auth_required
    @async_route
    async def deprovision_service_instance(instance_id: str):
        """Deprovision a service instance."""
        service_id = request.args.get('service_id')
        plan_id = request.args.get('plan_id')

        if not service_id:
            return error_response("BadRequest", "Missing service_id parameter", 400)
        if not plan_id:
            return error_response("BadRequest", "Missing plan_id parameter", 400)

        user_id = request.headers.get('X-Broker-API-Originating-Identity')

        try:
            broker = await get_broker()
            await broker.deprovision(
                instance_id,
                DeprovisionDetails(service_id=service_id, plan_id=plan_id),
                user_id=user_id
            )
            await broker.store.delete_instance_details(instance_id)

        except InstanceNotFoundError:
            return jsonify({}), 410
        except ProviderError as e:
            logger.error(f"Deprovisioning failed for {instance_id}: {e}")
            return error_response("InternalError", e.message, 500)
        except BrokerError as e:
            logger.error(f"Deprovision request failed: {e}")
            return error_response("InternalError", e.message, 500)

        return jsonify(DeprovisionResponse().model_dump(exclude_none=True)), 200

    @app.route('/health', methods=['GET'])
    def health_check():
        """Health check endpoint."""
        return jsonify({
            "status": "healthy",
            "service": "bigtable-broker",
            "version": __version__
        }), 200

    @app.errorhandler(404)
    def not_found(error):
        return error_response("NotFound", "Endpoint not found", 404)

    @app.errorhandler(405)
    def method_not_allowed(error):
        return error_response("MethodNotAllowed", "Method not allowed for this endpoint", 405)

    @app.errorhandler(500)
    def internal_error(error):
        return error_response("InternalError", "Internal server error", 500)

    return app


def run_server():
    """Run the Flask server, closing the instance store on shutdown."""
    global _broker
    app = create_app()
    try:
        app.run(
            host=config.api.host,
            port=config.api.port,
            debug=config.api.debug
        )
    finally:
        _broker = None
        asyncio.run(close_stores())
