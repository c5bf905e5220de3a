from .utils import create_access_token, verify_token, get_current_tenant_id

__all__ = ["create_access_token", "verify_token", "get_current_tenant_id"]
