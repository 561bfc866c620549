from pydantic_settings import BaseSettings


class AlignerSettings(BaseSettings):
    host: str = "0.0.0.0"
    port: int = 8000
    language: str = "th"
    tokenizer_engine: str = "newmm"
    gap_threshold_s: float = 0.15
    time_precision: int = 1
    include_trailing_group: bool = False
    transcript_path: str = "input/transcript.tsv"
    asr_path: str = "input/asr.json"
    output_dir: str = "output"
    log_level: str = "INFO"

    model_config = {"env_prefix": "ALIGNER_"}
