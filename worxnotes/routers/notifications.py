"""
Notification routes: the toasts currently on screen.
"""
from fastapi import APIRouter, Depends, HTTPException, status

from worxnotes.dependencies import Services, get_services

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/")
async def get_notifications(services: Services = Depends(get_services)):
    """
    Active toasts, oldest first.
    """
    return [n.to_dict() for n in services.toasts.active()]


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def dismiss_notification(notification_id: str, services: Services = Depends(get_services)):
    """
    Dismiss a toast before it times out.
    """
    if not services.toasts.dismiss(notification_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found"
        )
    return None
