"""Pattern library for backend credential discovery.

Every rule here is plain data: compiled regular expressions and the name
catalogs used to map environment-variable spellings to a semantic role.
Bump ``PATTERN_LIBRARY_VERSION`` whenever a rule changes meaning.
"""

import re

PATTERN_LIBRARY_VERSION = "3.1"

# Bearer tokens: three base64url segments with the literal JSON-header prefix.
TOKEN_PATTERN = re.compile(
    r"eyJ[A-Za-z0-9_-]{10,}\.[A-Za-z0-9_-]{10,}\.[A-Za-z0-9_-]+"
)

# Provider URL families
SUPABASE_URL_PATTERN = re.compile(
    r"https?://([a-zA-Z0-9_-]{2,})\.supabase\.(?:co|in|net)\b"
)
FIREBASE_DB_URL_PATTERN = re.compile(
    r"https?://([a-zA-Z0-9_-]+)\.(?:firebaseio\.com|firebasedatabase\.(?:com|app))\b"
)
FIREBASE_API_KEY_PATTERN = re.compile(r"AIza[0-9A-Za-z_-]{35}")

# Generic "looks like an API" URLs, only used when no named provider matched.
GENERIC_API_URL_PATTERNS = [
    re.compile(r"https?://[^\s\"'<>`\\]+/api(?![A-Za-z0-9_-])(?:/v\d+)?(?:[/?][^\s\"'<>`\\]*)?", re.IGNORECASE),
    re.compile(r"https?://api\.[^\s\"'<>`\\]+", re.IGNORECASE),
]

# Hosts that look like APIs but are analytics, CDNs or hosting noise.
GARBAGE_URL_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"googleapis\.com/storage/",
        r"cloudinary\.com",
        r"//cdn\.",
        r"\.cdn\.",
        r"google-analytics\.com",
        r"googletagmanager\.com",
        r"google\.com",
        r"facebook\.com",
        r"doubleclick\.net",
        r"sentry\.io",
        r"hotjar\.com",
        r"mixpanel\.com",
        r"segment\.io",
        r"intercom\.io",
        r"stripe\.com/js",
        r"paypal\.com/js",
        r"aws\.amazon\.com/s3",
        r"netlify\.com",
        r"vercel\.com",
        r"github\.com/assets",
        r"raw\.githubusercontent",
        r"gpt-engineer",
        r"w3\.org",
        r"schema\.org",
    )
]

# Credentials carried inside URLs and header idioms
APIKEY_QUERY_PATTERN = re.compile(r"[?&]apikey=([^&\s\"'#]+)", re.IGNORECASE)
BEARER_PATTERN = re.compile(
    r"Authorization[\"']?\s*[:=]\s*[\"'`]?Bearer\s+(eyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+)",
    re.IGNORECASE,
)
BEARER_PREFIX_PATTERN = re.compile(r"^Bearer\s+", re.IGNORECASE)

# Build-tool prefixes applied to environment variable names
ENV_PREFIXES = ("VITE_", "NEXT_PUBLIC_", "REACT_APP_", "NUXT_PUBLIC_", "EXPO_PUBLIC_", "PUBLIC_", "")

# Environment variable base names -> semantic role
ENV_NAME_ROLES: dict[str, str] = {
    "SUPABASE_URL": "supabase_url",
    "SUPABASE_PROJECT_URL": "supabase_url",
    "SUPABASE_ANON_KEY": "supabase_anon_key",
    "SUPABASE_KEY": "supabase_anon_key",
    "SUPABASE_PUBLIC_KEY": "supabase_anon_key",
    "SUPABASE_SERVICE_KEY": "supabase_service_key",
    "SUPABASE_SERVICE_ROLE_KEY": "supabase_service_key",
    "FIREBASE_API_KEY": "firebase_api_key",
    "FIREBASE_DATABASE_URL": "firebase_database_url",
    "FIREBASE_PROJECT_ID": "firebase_project_id",
    "FIREBASE_AUTH_DOMAIN": "firebase_auth_domain",
    "API_URL": "api_url",
    "API_BASE_URL": "api_url",
    "BACKEND_URL": "api_url",
}

# Identifier spellings used directly in application code
IDENTIFIER_ROLES: dict[str, str] = {
    "supabaseUrl": "supabase_url",
    "supabaseURL": "supabase_url",
    "supabase_url": "supabase_url",
    "supabaseProjectUrl": "supabase_url",
    "supabaseAnonKey": "supabase_anon_key",
    "supabaseKey": "supabase_anon_key",
    "supabase_key": "supabase_anon_key",
    "supabase_anon_key": "supabase_anon_key",
    "anonKey": "supabase_anon_key",
    "anon_key": "supabase_anon_key",
    "ANON_KEY": "supabase_anon_key",
    "supabaseServiceKey": "supabase_service_key",
    "supabaseServiceRoleKey": "supabase_service_key",
    "serviceRoleKey": "supabase_service_key",
    "serviceKey": "supabase_service_key",
    "service_key": "supabase_service_key",
    "service_role_key": "supabase_service_key",
    "firebaseApiKey": "firebase_api_key",
    "firebaseDatabaseUrl": "firebase_database_url",
    "firebaseProjectId": "firebase_project_id",
    "apiBaseUrl": "api_url",
    "apiBaseURL": "api_url",
}


def _build_name_catalog() -> dict[str, str]:
    catalog: dict[str, str] = {}
    for base, role in ENV_NAME_ROLES.items():
        for prefix in ENV_PREFIXES:
            catalog[prefix + base] = role
    catalog.update(IDENTIFIER_ROLES)
    return catalog


HINT_NAME_ROLES = _build_name_catalog()

# Longest names first so VITE_SUPABASE_URL wins over SUPABASE_URL.
_HINT_NAMES = "|".join(
    re.escape(name) for name in sorted(HINT_NAME_ROLES, key=len, reverse=True)
)

# NAME = "value", NAME: "value", "NAME": "value", NAME=value (.env files)
KEY_VALUE_HINT_PATTERN = re.compile(
    r"(?<![A-Za-z0-9_$])[\"']?(?P<name>" + _HINT_NAMES + r")[\"']?"
    r"\s*[:=]\s*(?P<quote>[\"'`]?)(?P<value>[^\"'`\s,;}<>]{4,})(?P=quote)"
)

# Framework idioms
CREATE_CLIENT_LITERAL_PATTERN = re.compile(
    r"createClient\s*\(\s*[\"'`](https?://[^\"'`]+)[\"'`]\s*,\s*[\"'`](eyJ[^\"'`]+)[\"'`]"
)
CREATE_CLIENT_VARIABLE_PATTERN = re.compile(
    r"createClient\s*\(\s*([A-Za-z_$][\w$]*)\s*,\s*([A-Za-z_$][\w$]*)\s*[,)]"
)
VARIABLE_DECLARATION_TEMPLATE = r"(?:const|let|var)\s+{name}\s*=\s*[\"'`]([^\"'`]+)[\"'`]"

FIREBASE_CONFIG_BLOCK_PATTERN = re.compile(
    r"(?:initializeApp\s*\(\s*|(?:firebaseConfig\w*)\s*=\s*)\{([^{}]{0,2000})\}"
)
CONFIG_FIELD_PATTERN = re.compile(r"[\"']?(\w+)[\"']?\s*:\s*[\"'`]([^\"'`]+)[\"'`]")
FIREBASE_CONFIG_FIELD_ROLES: dict[str, str] = {
    "apiKey": "firebase_api_key",
    "authDomain": "firebase_auth_domain",
    "projectId": "firebase_project_id",
    "databaseURL": "firebase_database_url",
}

DATA_ATTRIBUTE_PATTERN = re.compile(
    r"data-(supabase-url|supabase-key|supabase-anon-key|firebase-api-key|api-url)\s*=\s*[\"']([^\"']+)[\"']",
    re.IGNORECASE,
)
DATA_ATTRIBUTE_ROLES: dict[str, str] = {
    "supabase-url": "supabase_url",
    "supabase-key": "supabase_anon_key",
    "supabase-anon-key": "supabase_anon_key",
    "firebase-api-key": "firebase_api_key",
    "api-url": "api_url",
}

JSON_SCRIPT_BLOCK_PATTERN = re.compile(
    r"<script[^>]*type\s*=\s*[\"']application/json[\"'][^>]*>([^<]+)</script>",
    re.IGNORECASE,
)

# Fallback key patterns tried last by the credential prober
FALLBACK_KEY_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"supabase\.co/auth/v1/pk/public/(eyJ[^\s\"']+)",
        r"apikey[\"']?\s*[:=]\s*[\"']?(eyJ[^\s\"']+)",
        r"Authorization:\s*Bearer\s*(eyJ[^\s\"']+)",
        r"\"anon_key\"\s*:\s*\"(eyJ[^\"]+)\"",
        r"\"service_key\"\s*:\s*\"(eyJ[^\"]+)\"",
    )
]

# Explicit key assignments used by the aggressive key pass
EXPLICIT_KEY_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"(?:VITE_|NEXT_PUBLIC_|REACT_APP_)?SUPABASE(?:_ANON|_SERVICE)?_?KEY\s*[:=]\s*[\"']?"
        r"(eyJ[a-zA-Z0-9_-]+\.[a-zA-Z0-9_-]+\.[a-zA-Z0-9_-]+)",
        r"supabase(?:Anon|Service)?Key\s*[:=]\s*[\"']?(eyJ[a-zA-Z0-9_-]+\.[a-zA-Z0-9_-]+\.[a-zA-Z0-9_-]+)",
        r"apikey\s*[:=]\s*[\"']?(eyJ[a-zA-Z0-9_-]+\.[a-zA-Z0-9_-]+\.[a-zA-Z0-9_-]+)",
        r"\"apiKey\"\s*:\s*\"(eyJ[^\"]+)\"",
        r"createClient\s*\([^,]+,\s*[\"']?(eyJ[a-zA-Z0-9_-]+\.[a-zA-Z0-9_-]+\.[a-zA-Z0-9_-]+)",
    )
]

# Surface markers
SCRIPT_SRC_MARKERS: dict[str, tuple[str, ...]] = {
    "supabase": ("supabase",),
    "firebase": ("firebase", "gstatic.com/firebasejs"),
}
STORAGE_KEY_MARKERS: dict[str, tuple[str, ...]] = {
    "supabase": ("supabase", "sb-"),
    "firebase": ("firebase",),
}

WINDOW_GLOBALS = (
    # Supabase
    "supabase", "supabaseClient", "_supabase", "__SUPABASE__",
    # Firebase
    "firebase", "firebaseConfig", "_firebase", "__FIREBASE__",
    # Framework state
    "__NEXT_DATA__", "__NUXT__", "__INITIAL_STATE__",
    "env", "ENV", "__env__", "__ENV__", "config", "CONFIG", "appConfig",
    # API
    "apiConfig", "API_CONFIG", "API_URL",
)
SERIALIZED_GLOBALS = ("__next_f",)
GLOBAL_NAME_MARKERS = ("supabase", "firebase", "config", "api")

BUNDLE_NAME_PATTERN = re.compile(r"chunk|bundle|main|app|index|vendor|runtime", re.IGNORECASE)
SCRIPT_RESOURCE_PATTERN = re.compile(
    r"\.(?:js|mjs|ts|jsx|tsx)(?:[?#]|$)|chunk|bundle|main|app\.|index\.", re.IGNORECASE
)
