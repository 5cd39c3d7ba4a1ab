from pydantic import BaseModel, Field, ValidationError

class SettingsSchema(BaseModel):
    goal_weight: float = Field(170.0, gt=0)
    chart_days: int = Field(30, ge=1)
    rolling_window: int = Field(7, ge=1)
    app_version: str = "1.0.0"

def validate_settings(data: dict) -> None:
    try:
        SettingsSchema(**data)
    except ValidationError as e:
        raise ValueError(str(e))
