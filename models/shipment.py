from pydantic import BaseModel


class ShipmentCreatedDTO(BaseModel):
    aggregator_order_id: str
    shipment_id: str
    status: str | None = None


class CourierAssignmentDTO(BaseModel):
    awb_code: str
    courier_name: str | None = None
    status: str | None = None
