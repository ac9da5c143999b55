from fastapi import APIRouter, Depends

from loan_console.api import deps
from loan_console.clients.lending_api import LendingAPIClient
from loan_console.services.dashboard import build_dashboard_summary

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("")
async def dashboard(client: LendingAPIClient = Depends(deps.get_lending_client)) -> dict:
    return await build_dashboard_summary(client)
