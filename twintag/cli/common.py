"""
Default values for the CLI
"""

# Environment variable naming the profile to use when --profile is not given
PROFILE_ENV_VAR = "TWINTAG_PROFILE"
# Environment variable holding the token when --token is not given
TOKEN_ENV_VAR = "TWINTAG_TOKEN"
LIST_COLUMNS = ["name", "type", "size", "qid"]
