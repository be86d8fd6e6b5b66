"""Store implementations."""

from gmailrouter.infrastructure.stores.yaml_policy_store import YamlPolicyStore

__all__ = [
    "YamlPolicyStore",
]
