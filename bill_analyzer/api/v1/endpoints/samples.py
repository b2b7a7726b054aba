"""
Sample Bill API Endpoints.
"""

from typing import List

from fastapi import APIRouter

from bill_analyzer.core.exceptions import NotFoundException
from bill_analyzer.samples import SAMPLE_BILLS, get_sample
from bill_analyzer.schemas.analysis import SampleBillSchema

router = APIRouter()


@router.get("", response_model=List[SampleBillSchema])
async def list_samples():
    """List the bundled sample bills."""
    return [SampleBillSchema(**sample.to_dict()) for sample in SAMPLE_BILLS]


@router.get("/{name}", response_model=SampleBillSchema)
async def get_sample_bill(name: str):
    """Get one sample bill by name (case-insensitive)."""
    sample = get_sample(name)
    if sample is None:
        raise NotFoundException(f"Sample '{name}' not found")
    return SampleBillSchema(**sample.to_dict())
