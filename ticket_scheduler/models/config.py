from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class ReportsConfig(BaseModel):
    """Formatos de relatório habilitados além do CSV"""

    markdown: bool = True
    excel: bool = True
    pdf: bool = True


class SetupConfig(BaseModel):
    """Configuração principal do sistema"""

    tickets_file: str
    teams_file: str
    output_dir: str = Field(default="output")
    log_dir: str = Field(default="logs")
    log_level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR)$")
    marker: str = Field(default="X", min_length=1)
    stall_limit: Optional[int] = Field(default=None, gt=0)
    reports: ReportsConfig = Field(default_factory=ReportsConfig)

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        """Aceita o nível de log em qualquer caixa"""
        return v.upper() if isinstance(v, str) else v

    def resolve_paths(self, base_dir: Path) -> "SetupConfig":
        """
        Resolve caminhos relativos a partir do diretório de configuração

        Args:
            base_dir: Diretório onde está o setup.json

        Returns:
            SetupConfig: Nova configuração com caminhos absolutos
        """
        def resolve(value: str) -> str:
            path = Path(value)
            return str(path if path.is_absolute() else base_dir / path)

        return self.model_copy(update={
            "tickets_file": resolve(self.tickets_file),
            "teams_file": resolve(self.teams_file),
        })
