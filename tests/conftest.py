import os

from dotenv import load_dotenv


# Load the project's .env so the integration tests can pick up a real
# endpoint (STAGED_REVIEW_TEST_API_KEY and friends) when one is configured.
PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))
ENV_PATH = os.path.join(PROJECT_ROOT, ".env")

# Missing file is fine.
load_dotenv(dotenv_path=ENV_PATH, override=False)
