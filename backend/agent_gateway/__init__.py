from .client import AgentGatewayClient, AgentTransportError

__all__ = ["AgentGatewayClient", "AgentTransportError"]
