from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="ECHOLOG_", env_file=".env", extra="ignore")

    # Basic auth settings, username -> password. The username is the memo owner id.
    users: dict[str, str] = {}

    # Storage settings
    local_memo_store_path: str = "data/memos.json"
    embedding_dimensions: int = 1536

    # Linking settings
    similarity_threshold: float = 0.75
    max_related_memos: int = 10
    search_similarity_threshold: float = 0.7

    # Knowledge graph settings
    default_edge_weight: float = 0.8
    graph_memo_limit: int = 100
    layout_repulsion: float = 1000.0
    layout_attraction: float = 0.01
    layout_damping: float = 0.5
    layout_iterations: int = 50
    layout_center_x: float = 200.0
    layout_center_y: float = 200.0
    layout_radius: float = 150.0

    # LLM settings
    openai_api_key: str | None = None
    annotations_enabled: bool = True
    llm_model: str = "gpt-4o-mini"
    embedding_model: str = "text-embedding-3-small"
    annotation_cache_ttl_seconds: int = 3600
    cache_sweep_interval_seconds: float = 300.0

    log_level: str = "INFO"  # Can be DEBUG, INFO, WARNING, ERROR, CRITICAL


settings = Settings()
