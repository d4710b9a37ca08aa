"""
Unit Tests for request/response schemas
"""
import pytest
from pydantic import ValidationError

from app.schemas.boarding import RoomCreate
from app.schemas.common import OccupancyUpdate, collect_warnings
from app.schemas.inventory import ItemResponse, StockStatus, stock_status, BatchStockUpdateRequest
from app.schemas.lookup import LookupCreate
from app.schemas.student import StudentCreate
from app.services.occupancy import RoomStatus


class TestStockStatus:

    @pytest.mark.parametrize("in_stock,minimum,expected", [
        (0, 5, StockStatus.OUT_OF_STOCK),
        (3, 5, StockStatus.LOW_STOCK),
        (5, 5, StockStatus.LOW_STOCK),
        (6, 5, StockStatus.IN_STOCK),
        (1, 0, StockStatus.IN_STOCK),
    ])
    def test_stock_status(self, in_stock, minimum, expected):
        assert stock_status(in_stock, minimum) == expected

    def test_item_response_computed_fields(self):
        item = ItemResponse(
            id="i1",
            item_name="Blanket",
            in_stock=3,
            unit_price=1200.5,
            minimum_stock_level=10,
            pending_requisitions=0,
        )

        data = item.model_dump()

        assert data["status"] == StockStatus.LOW_STOCK
        assert data["total_value"] == 3601.5

    def test_batch_request_requires_updates(self):
        with pytest.raises(ValidationError):
            BatchStockUpdateRequest(updates=[])


class TestLookupCreate:

    def test_name_is_stripped(self):
        assert LookupCreate(name="  Grade 7 ").name == "Grade 7"

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError):
            LookupCreate(name="   ")


class TestStudentCreate:

    def test_defaults_to_active(self):
        student = StudentCreate(admission_number="ADM1", name="Amani Otieno")

        assert student.status.value == "Active"

    def test_blank_admission_number_rejected(self):
        with pytest.raises(ValidationError):
            StudentCreate(admission_number="  ", name="Amani Otieno")


class TestRoomCreate:

    def test_capacity_must_be_positive(self):
        with pytest.raises(ValidationError):
            RoomCreate(house_id="h1", room_number="A1", capacity=0)

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            RoomCreate(house_id="h1", room_number="A1", capacity=2, status="haunted")


class TestCollectWarnings:

    def test_collects_only_present_warnings(self):
        updates = [
            OccupancyUpdate(room_id="a", occupancy=1, status=RoomStatus.PARTIALLY_OCCUPIED, written=True),
            OccupancyUpdate(room_id="b", warning="Room b not found"),
        ]

        assert collect_warnings(updates) == ["Room b not found"]
