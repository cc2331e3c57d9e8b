from __future__ import annotations

import structlog
from dependency_injector import containers, providers

from core.settings import get_settings
from infra.resources import DatabaseResource, HttpClientResource


logger = structlog.get_logger("bloom")


class InfrastructureContainer(containers.DeclarativeContainer):
    settings = providers.Singleton(get_settings)
    logger = providers.Object(logger)

    identity_settings = providers.Callable(lambda s: s.IDENTITY, settings)

    # Database
    database = providers.Singleton(
        DatabaseResource,
        database_url=settings.provided.DATABASE.DATABASE_URL,
    )

    # Pooled client for the completion endpoint
    http_client = providers.Singleton(
        HttpClientResource,
        timeout_seconds=settings.provided.COMPLETION.COMPLETION_TIMEOUT_SECONDS,
    )


class ServiceContainer(containers.DeclarativeContainer):
    """Application services - depends on infrastructure."""

    infrastructure = providers.DependenciesContainer()

    completion_client = providers.Singleton(
        "api.features.conversation.completion.CompletionClient",
        http_client=infrastructure.http_client,
        api_url=infrastructure.settings.provided.COMPLETION.COMPLETION_API_URL,
        api_key=infrastructure.settings.provided.COMPLETION.COMPLETION_API_KEY,
    )

    chat_orchestrator = providers.Factory(
        "api.features.conversation.orchestrator.ChatOrchestrator",
        completion_client=completion_client,
        default_model=infrastructure.settings.provided.COMPLETION.DEFAULT_MODEL,
    )

    conversation_service = providers.Factory(
        "api.features.conversation.service.ConversationService",
    )


class ControllerContainer(containers.DeclarativeContainer):
    """Controller-specific dependencies."""

    services = providers.DependenciesContainer()

    conversation_controller = providers.Factory(
        "api.features.conversation.controller.ConversationController",
        conversation_service=services.conversation_service,
        chat_orchestrator=services.chat_orchestrator,
    )


class ApplicationContainer(containers.DeclarativeContainer):
    """Main application container composing all sub-containers."""

    wiring_config = containers.WiringConfiguration(
        modules=[
            "api.shared.db",
            "api.shared.identity",
            "api.features.conversation.router",
        ]
    )

    infrastructure = providers.Container(InfrastructureContainer)
    services = providers.Container(ServiceContainer, infrastructure=infrastructure)
    controllers = providers.Container(ControllerContainer, services=services)
