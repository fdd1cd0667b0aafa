from pydantic_settings import BaseSettings


class Settings(BaseSettings):

    vault_path: str = "./vault"
    vault_excluded_paths: list[str] = []

    enable_semantic_search: bool = False
    max_source_chunks: int = 15

    chroma_host: str = "localhost"
    chroma_port: int = 8001
    chroma_collection: str = "vault_notes"

    embedding_model: str = "intfloat/multilingual-e5-base"
    embedding_query_prefix: str = "query: "
    embedding_passage_prefix: str = "passage: "

    chunk_size: int = 1000
    chunk_overlap: int = 200
    ingest_batch_size: int = 50

    rerank_max_chars: int = 3000

    # Web search
    web_search_provider: str = "tavily"
    web_search_api_keys: dict[str, str] = {}
    web_search_api_key: str = ""
    web_search_base_url: str = ""
    web_search_timeout: float = 30.0

    # Question condensing for web search
    llm_base_url: str = "http://localhost:11434/v1"
    llm_model: str = "qwen2.5:7b"
    llm_api_key: str = "ollama"
    llm_temperature: float = 0.0

    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
