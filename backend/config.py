import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables in priority order:
# 1. backend/.env (lowest priority)
# 2. repo_root/.env (overrides backend)
# 3. repo_root/.env.local (highest priority - overrides everything)
repo_root = Path(__file__).parent.parent
env_local = repo_root / ".env.local"
env_file = repo_root / ".env"
backend_env = Path(__file__).parent / ".env"

if backend_env.exists():
    load_dotenv(dotenv_path=backend_env, override=False)
if env_file.exists():
    load_dotenv(dotenv_path=env_file, override=True)
if env_local.exists():
    load_dotenv(dotenv_path=env_local, override=True)

# Neo4j configuration - read from environment variables
NEO4J_URI = os.getenv("NEO4J_URI", "neo4j://localhost:7687")
NEO4J_USER = os.getenv("NEO4J_USER", "neo4j")
NEO4J_PASSWORD = os.getenv("NEO4J_PASSWORD")  # Required for the neo4j backend
NEO4J_DATABASE = os.getenv("NEO4J_DATABASE", "neo4j")

# "neo4j" for the real database, "memory" for a process-local graph (dev/tests)
GRAPH_STORE_BACKEND = os.getenv("GRAPH_STORE_BACKEND", "neo4j").strip().lower()

# -----------------------------------------------------------------------------
# Graph semantics
# -----------------------------------------------------------------------------
# Concepts without a mapId (legacy records) belong to this map
DEFAULT_MAP_ID = os.getenv("DEFAULT_MAP_ID", "default")
DEFAULT_MAP_EMOJI = os.getenv("DEFAULT_MAP_EMOJI", "🧠")
# Hard cap on GET /api/concepts; there is no pagination cursor
CONCEPT_PAGE_SIZE = int(os.getenv("CONCEPT_PAGE_SIZE", "100"))
# Upper bound on shortest-path length (hops)
PATH_MAX_HOPS = int(os.getenv("PATH_MAX_HOPS", "10"))

# -----------------------------------------------------------------------------
# HTTP / process
# -----------------------------------------------------------------------------
CORS_ORIGINS = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173").split(",")
    if o.strip()
]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
PORT = int(os.getenv("PORT", "4000"))

# Seed the demo map on startup when the store is empty (dev-only)
SEED_ON_STARTUP = os.getenv("SEED_ON_STARTUP", "false").lower() in ("true", "1", "yes")
