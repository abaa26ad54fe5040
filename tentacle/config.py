from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="TENTACLE_")

    # Document storage
    documents_folder: str = "data/documents"
    trash_folder_name: str = ".trash"

    # Index settings
    local_index_path: str = "data/index.json"

    # Chunking
    chunk_target_chars: int = 800
    chunk_overlap_chars: int = 200

    # Limits on editor trees
    max_tree_depth: int = 64
    max_tree_nodes: int = 50_000

    # Search defaults
    search_limit: int = 20
    search_min_score: float = 0.0

    log_level: str = "INFO"  # Can be DEBUG, INFO, WARNING, ERROR, CRITICAL


settings = Settings()
