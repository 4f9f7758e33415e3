"""Pydantic response models for API."""

from pydantic import BaseModel


class TempoCandidateResponse(BaseModel):
    bpm: float
    strength: float


class TempoCurvePointResponse(BaseModel):
    time: float
    bpm: float
    confidence: float


class AnalysisResponse(BaseModel):
    filename: str = ""
    bpm: float | None = None  # null when no tempo was detected
    confidence: float
    candidates: list[TempoCandidateResponse] = []
    envelope: list[float] = []
    autocorrelation: list[float] = []
    min_lag: int = 1
    envelope_rate: float = 0.0
    tempo_curve: list[TempoCurvePointResponse] = []
    duration: float = 0.0
    sample_rate: int = 0
    channels: int = 0
    min_bpm: float
    max_bpm: float


class FileResultResponse(BaseModel):
    filename: str
    duration: float
    bpm: float | None = None
    confidence: float
    tempo_curve: list[TempoCurvePointResponse] = []


class BatchResponse(BaseModel):
    results: list[FileResultResponse]
    analyzed: int
    failed: int
