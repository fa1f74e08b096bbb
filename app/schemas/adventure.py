from pydantic import BaseModel
from typing import Optional, List


class DateRangeOut(BaseModel):
    startDate: str
    endDate: str
    isPast: bool


class VesselTypesOut(BaseModel):
    caiacSingle: bool
    caiacDublu: bool
    placaSUP: bool


class DurationOut(BaseModel):
    value: int
    unit: str


class AdventureOut(BaseModel):
    id: str
    slug: str
    title: str
    images: List[str] = []
    price: float
    includedItems: List[str] = []
    additionalInfo: List[str] = []
    shortDescription: str = ""
    location: str
    meetingPoint: Optional[str] = None
    difficulty: str
    duration: DurationOut
    advancePaymentPercentage: int
    bookingCutoffHour: Optional[int] = None
    availableKayakTypes: VesselTypesOut
    isRecurring: bool = False
    categoryId: Optional[str] = None
    nextDate: Optional[DateRangeOut] = None
    dates: List[DateRangeOut] = []


class CategoryOut(BaseModel):
    id: str
    slug: str
    title: str
    description: str = ""
    image: str = ""


class CategoryAdventuresOut(BaseModel):
    category: CategoryOut
    adventures: List[AdventureOut] = []


class FacetOut(BaseModel):
    label: str
    value: str


class AdventureFacetsOut(BaseModel):
    locations: List[FacetOut] = []
    durations: List[FacetOut] = []
