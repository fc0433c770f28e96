import os
import sentry_sdk
from sentry_sdk.integrations.flask import FlaskIntegration
from dotenv import load_dotenv

load_dotenv()
if os.getenv("ENV_FILE"):
    load_dotenv(os.getenv("ENV_FILE"))

# Initialize Sentry
sentry_dsn = os.getenv("SENTRY_DSN")
if sentry_dsn:
    sentry_sdk.init(
        dsn=sentry_dsn,
        integrations=[FlaskIntegration()],
        traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.1")),
    )
    print("[Sentry] Proxy monitoring enabled.")

from flask import Flask

from brokers.flattrade import FlattradeClient
from core.config import STRICT_SEGMENTS
from fetchers.factory import ReferenceSourceFactory
from resolvers.symbol_service import SymbolCatalogService
from storage.credentials import CredentialStore

app = Flask(__name__)

# Process-wide state, read by the routes through current_app.extensions
app.extensions["credential_store"] = CredentialStore()
app.extensions["symbol_service"]   = SymbolCatalogService(
    factory=ReferenceSourceFactory(strict=STRICT_SEGMENTS),
)
app.extensions["flattrade_client"] = FlattradeClient()

# NOTE: routes are imported by run.py AFTER this module loads,
# which avoids the circular import that would occur if we imported them here.
