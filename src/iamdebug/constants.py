# Fixed identifiers shared by the preview and login surfaces.
# Created: 2026-10-18

from __future__ import annotations

# Vault keys (service, account); one active identity, not namespaced per user
CLIENT_SECRET = "CLIENT_SECRET"
ACCESS_TOKEN = "ACCESS_TOKEN"

# Settings-store keys for the non-secret login configuration
IAM_BASE_URL = "iamDebugger.baseUrl"
IAM_SERVICE_CLIENT_ID = "iamDebugger.clientId"

# Loopback redirect capture
REDIRECT_PORT = 8010
REDIRECT_PATH = "/callback"
REDIRECT_URI = f"http://localhost:{REDIRECT_PORT}{REDIRECT_PATH}"

OAUTH_SCOPES: list[str] = [
    "internal_application_mgt_create",
    "internal_application_mgt_delete",
    "internal_application_mgt_update",
    "internal_application_mgt_view",
    "internal_functional_lib_view",
]
OAUTH_SCOPE = " ".join(OAUTH_SCOPES)

# Webview commands
COMMAND_LOGIN = "login"
COMMAND_ACCESS = "access"
COMMAND_CODE = "code"

# Templates shipped under iamdebug/ui
DIAGRAM_HTML_NAME = "diagram.html"
AUTHENTICATION_HTML_NAME = "login.html"

DIAGRAM_VIEW_TYPE = "Diagram"
LOGIN_VIEW_TYPE = "IAM Login"
LOGIN_TITLE = "IAM Login"

# Labels rendered into the sequence diagram for each captured debug message
DEBUG_LABELS: dict[str, str] = {
    "SAML_REQUEST": "SAML Request",
    "SAML_RESPONSE": "SAML Response",
    "OIDC_AUTHZ_REQUEST": "OIDC Authorization Request",
    "OIDC_AUTHZ_RESPONSE": "OIDC Authorization Response",
    "OIDC_TOKEN_REQUEST": "OIDC Token Request",
    "OIDC_TOKEN_RESPONSE": "OIDC Token Response",
}

MESSAGE_CONFIGURATION_SUCCESS = "Successfully configured the identity server login."
