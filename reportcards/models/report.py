"""
Report Record Models
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Dict, Any, List, Optional, Union


class ReportRecord(BaseModel):
    """One patient's diagnostic result plus display metadata."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: Union[int, str]
    diagnosis: Optional[str] = ""
    # Raw value; coerced by the resolver
    confidence: Optional[Any] = None
    patient_name: str = Field(default="", alias="patientName")
    age: Optional[Union[int, str]] = None
    sex: Optional[str] = None
    doctor: Optional[str] = None
    date: Optional[str] = None
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    gradcam_url: Optional[str] = Field(default=None, alias="gradcamUrl")
    yolo_url: Optional[str] = Field(default=None, alias="yoloUrl")

    @property
    def key(self) -> str:
        """Correlation key between a record and its rendered region."""
        return str(self.id)


class RecommendationResponse(BaseModel):
    """Resolved findings for one record."""
    id: Union[int, str]
    outcome: str
    diagnosis: str
    confidence: str
    prevention: str
    treatment: str
    specialist: str


class ReportListResponse(BaseModel):
    """Stored records, in store order."""
    count: int
    reports: List[Dict[str, Any]]


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    timestamp: str
    components: Dict[str, str]
