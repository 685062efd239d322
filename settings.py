from pathlib import Path
from config.loader import get_config_loader

# Get the config loader instance
config = get_config_loader()

# Logging
LOG_LEVEL = config.get("LOG_LEVEL", "warning")
DEBUG_LOG_FILE = config.get("DEBUG_LOG_FILE", "gdocs_sync_debug.log")

# Persisted settings record ({googleDriveFolderId, credentials, tokens})
SETTINGS_FILE = config.get("SETTINGS_FILE", str(Path.home() / ".gdocs-sync" / "settings.json"))

# Delay before the browser is launched for authorization, so the notice shows first
BROWSER_LAUNCH_DELAY = config.get("BROWSER_LAUNCH_DELAY", 2.0)

# Loopback OAuth callback listener
# Port 0 lets the OS pick a free port; Google accepts any loopback port for installed apps
OAUTH_CALLBACK_HOST = config.get("OAUTH_CALLBACK_HOST", "127.0.0.1")
OAUTH_CALLBACK_PORT = config.get("OAUTH_CALLBACK_PORT", 0)
OAUTH_CALLBACK_PATH = "/oauth2callback"
# Maximum time to wait for the browser round-trip, in seconds
OAUTH_CALLBACK_TIMEOUT = config.get("OAUTH_CALLBACK_TIMEOUT", 300.0)

# Timeout for Drive API and token endpoint requests
REQUEST_TIMEOUT = config.get("REQUEST_TIMEOUT", 60.0)

# Google OAuth endpoints (hardcoded - not user configurable)
# auth_uri / token_uri from the client credentials JSON take precedence when present
GOOGLE_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"

# Full Drive access: drive.file only sees files this app created, so existing
# documents and user-made folders would be invisible. Space-separated to override.
SCOPES = config.get("GOOGLE_SCOPES", "https://www.googleapis.com/auth/drive").split()

# Google Drive API
DRIVE_API_BASE = "https://www.googleapis.com/drive/v3"
DRIVE_UPLOAD_BASE = "https://www.googleapis.com/upload/drive/v3"
GOOGLE_DOC_MIME_TYPE = "application/vnd.google-apps.document"
GOOGLE_DOCS_URL = "https://docs.google.com/document/d/"
