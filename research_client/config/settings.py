from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    research_api_url: str = "http://localhost:3001/api"
    # Connect/write timeout only; reads are unbounded and policed by the liveness monitor
    request_timeout: float = 30.0
    liveness_timeout: float = 600.0
    liveness_check_interval: float = 30.0
    liveness_soft_threshold: float = 300.0

    class Config:
        env_file = ".env"
