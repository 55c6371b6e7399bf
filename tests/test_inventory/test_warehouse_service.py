from __future__ import annotations
import pytest
from builders_yard.core.database import Database
from builders_yard.core.errors import (
    InsertVerificationFailed, NonPositiveQuantityError, NotFoundError, ValidationError,
)
from builders_yard.core.logger import StructuredLogger
from builders_yard.core.models import MaterialKind, UpsertState
from builders_yard.inventory.warehouse_service import WarehouseService
from builders_yard.materials.variants import (
    Beam, Brick, BrickForm, MineralWool, WoolForm,
)


class _ForgetfulDatabase(Database):
    """Accepts inserts but never finds anything afterwards."""

    def find_material_by_specification(self, tag, specification):
        return None


@pytest.fixture
def log(tmp_path):
    logger = StructuredLogger(log_dir=str(tmp_path / "logs"))
    yield logger
    logger.close()


@pytest.fixture
def db(tmp_path):
    database = Database(str(tmp_path / "test.sqlite"))
    database.initialize(["Warehouse 1", "Warehouse 2"])
    yield database
    database.close()


@pytest.fixture
def service(db, log):
    return WarehouseService(db, logger=log)


def _brick(thickness=15, price=1000):
    return Brick(BrickForm.SOLID, thickness, price, 27)


class TestResolve:
    def test_new_material_created(self, service):
        result = service.resolve(_brick())
        assert result.state == UpsertState.CREATED
        assert result.material_id > 0

    def test_same_specification_matched(self, service):
        first = service.resolve(_brick(price=1000))
        second = service.resolve(_brick(price=1200))
        assert second.state == UpsertState.MATCHED
        assert second.material_id == first.material_id
        assert len(service.get_all_materials()) == 1

    def test_match_keeps_stored_price(self, service):
        first = service.resolve(_brick(price=1000))
        service.resolve(_brick(price=1200))
        assert service.get_material(first.material_id).unit_price == 1000.0

    def test_int_and_float_specification_match(self, service):
        a = service.resolve(_brick(thickness=15))
        b = service.resolve(_brick(thickness=15.0))
        assert a.material_id == b.material_id

    def test_different_specification_distinct(self, service):
        a = service.resolve(_brick(thickness=15))
        b = service.resolve(_brick(thickness=20))
        assert a.material_id != b.material_id
        assert b.state == UpsertState.CREATED

    def test_name_not_part_of_key(self, service):
        a = service.resolve(Brick(BrickForm.SOLID, 15, 1000, 27, name="Red"))
        b = service.resolve(Brick(BrickForm.SOLID, 15, 1000, 27, name="Blue"))
        assert a.material_id == b.material_id

    def test_insert_verification(self, tmp_path):
        database = _ForgetfulDatabase(str(tmp_path / "forgetful.sqlite"))
        database.initialize(["Warehouse 1"])
        service = WarehouseService(database)
        with pytest.raises(InsertVerificationFailed):
            service.resolve(_brick())
        database.close()

    def test_find_material(self, service):
        assert service.find_material(_brick()) is None
        result = service.resolve(_brick())
        found = service.find_material(_brick(price=1))
        assert found.id == result.material_id
        assert found.unit_price == 1000.0


class TestAddMaterial:
    def test_add_new_and_existing(self, service):
        first = service.add_material(_brick(), 1, 3)
        second = service.add_material(_brick(price=5), 1, 2)
        assert first.created
        assert second.state == UpsertState.MATCHED
        content = service.get_warehouse_content(1)
        assert len(content) == 1
        material, qty = content[0]
        assert material.id == first.material_id
        assert qty == 5

    def test_same_material_in_two_warehouses(self, service):
        a = service.add_material(_brick(), 1, 3)
        b = service.add_material(_brick(), 2, 4)
        assert a.material_id == b.material_id
        assert service.get_warehouse_content(2)[0][1] == 4

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, True])
    def test_non_positive_quantity(self, service, quantity):
        with pytest.raises(NonPositiveQuantityError):
            service.add_material(_brick(), 1, quantity)
        assert service.get_all_materials() == []

    def test_unknown_warehouse(self, service):
        with pytest.raises(NotFoundError):
            service.add_material(_brick(), 99, 1)
        assert service.get_all_materials() == []

    def test_movements_logged(self, service, log):
        result = service.add_material(_brick(), 1, 3)
        service.add_material(_brick(), 1, 2)
        movements = log.read_movements()
        assert [m["action"] for m in movements] == ["ADD_NEW", "UPDATE_EXISTING"]
        assert movements[0]["material_id"] == result.material_id
        assert movements[1]["quantity"] == 2


class TestRemoveMaterial:
    def test_partial_remove(self, service):
        mid = service.add_material(_brick(), 1, 5).material_id
        assert service.remove_material(1, mid, 2) == 3
        assert service.get_warehouse_content(1)[0][1] == 3

    def test_remove_all_drops_catalog_row(self, service):
        mid = service.add_material(_brick(), 1, 5).material_id
        assert service.remove_material(1, mid, 5) == 0
        assert service.get_warehouse_content(1) == []
        with pytest.raises(NotFoundError):
            service.get_material(mid)

    def test_remove_more_than_held(self, service):
        mid = service.add_material(_brick(), 1, 2).material_id
        assert service.remove_material(1, mid, 10) == 0
        assert service.get_all_materials() == []

    def test_catalog_row_kept_while_held_elsewhere(self, service):
        mid = service.add_material(_brick(), 1, 2).material_id
        service.add_material(_brick(), 2, 1)
        service.remove_material(1, mid, 2)
        assert service.get_material(mid).id == mid
        assert service.get_warehouse_content(2)[0][1] == 1

    def test_re_adding_after_removal_creates_again(self, service):
        mid = service.add_material(_brick(), 1, 1).material_id
        service.remove_material(1, mid, 1)
        result = service.add_material(_brick(), 1, 1)
        assert result.created

    def test_not_held(self, service):
        mid = service.add_material(_brick(), 1, 2).material_id
        with pytest.raises(NotFoundError):
            service.remove_material(2, mid, 1)

    def test_non_positive(self, service):
        mid = service.add_material(_brick(), 1, 2).material_id
        with pytest.raises(NonPositiveQuantityError):
            service.remove_material(1, mid, 0)

    def test_logged(self, service, log):
        mid = service.add_material(_brick(), 1, 2).material_id
        service.remove_material(1, mid, 1)
        last = log.read_movements()[-1]
        assert last["action"] == "REMOVE"
        assert last["material_name"] == "Brick"


class TestHolding:
    def test_get_holding(self, service):
        mid = service.add_material(_brick(), 2, 4).material_id
        holding = service.get_holding(2, mid)
        assert holding.to_dict() == {"warehouse_id": 2, "material_id": mid, "quantity": 4}
        with pytest.raises(NotFoundError):
            service.get_holding(1, mid)


class TestSetQuantity:
    def test_set(self, service, log):
        mid = service.add_material(_brick(), 1, 2).material_id
        service.set_quantity(1, mid, 7)
        assert service.get_warehouse_content(1)[0][1] == 7
        assert log.read_movements()[-1]["action"] == "SET_QUANTITY"

    def test_set_zero_drops(self, service):
        mid = service.add_material(_brick(), 1, 2).material_id
        service.set_quantity(1, mid, 0)
        assert service.get_warehouse_content(1) == []
        assert service.get_all_materials() == []

    def test_negative(self, service):
        mid = service.add_material(_brick(), 1, 2).material_id
        with pytest.raises(ValidationError):
            service.set_quantity(1, mid, -1)

    def test_not_held(self, service):
        with pytest.raises(NotFoundError):
            service.set_quantity(1, 42, 3)


class TestUpdateMaterial:
    def test_update_price_and_name(self, service):
        mid = service.add_material(_brick(), 1, 1).material_id
        material = service.get_material(mid)
        material.unit_price = 1100
        material.name = "Red brick"
        service.update_material(material)
        stored = service.get_material(mid)
        assert stored.unit_price == 1100.0
        assert stored.name == "Red brick"

    def test_update_specification(self, service):
        mid = service.add_material(_brick(), 1, 1).material_id
        material = service.get_material(mid)
        material.thickness = 25
        service.update_material(material)
        assert service.find_material(_brick(thickness=25)).id == mid
        assert service.find_material(_brick(thickness=15)) is None

    def test_uncataloged(self, service):
        with pytest.raises(ValidationError):
            service.update_material(_brick())

    def test_missing_row(self, service):
        with pytest.raises(NotFoundError):
            service.update_material(Brick(BrickForm.SOLID, 15, 1000, 27, id=42))

    def test_other_variant_rejected(self, service):
        mid = service.add_material(_brick(), 1, 1).material_id
        with pytest.raises(ValidationError) as exc:
            service.update_material(Beam(12, 4, True, 1000, 27, id=mid))
        assert exc.value.field == "tag"
        assert [m.TAG for m in service.get_all_materials()] == ["Brick"]
        assert service.total_value(1) == pytest.approx(1270.0)

    def test_specification_collision(self, service):
        first = service.add_material(_brick(thickness=15), 1, 1).material_id
        second = service.add_material(_brick(thickness=20), 1, 1).material_id
        material = service.get_material(first)
        material.thickness = 20
        with pytest.raises(ValidationError) as exc:
            service.update_material(material)
        assert exc.value.field == "specification"
        assert str(second) in str(exc.value)
        assert service.get_material(first).thickness == 15.0

    def test_unchanged_specification_is_not_a_collision(self, service):
        mid = service.add_material(_brick(), 1, 1).material_id
        material = service.get_material(mid)
        material.vat_percent = 5
        service.update_material(material)
        assert service.get_material(mid).vat_percent == 5.0


class TestQueries:
    def test_total_value(self, service):
        service.add_material(_brick(), 1, 2)
        service.add_material(Beam(12, 4, True, 1000, 27), 1, 1)
        assert service.total_value(1) == pytest.approx(7620.0)
        assert service.total_value(2) == 0

    def test_total_value_unknown_warehouse(self, service):
        with pytest.raises(NotFoundError):
            service.total_value(99)

    def test_warehouses(self, service):
        assert [w.name for w in service.get_warehouses()] == ["Warehouse 1", "Warehouse 2"]
        assert service.get_warehouse(2).name == "Warehouse 2"
        with pytest.raises(NotFoundError):
            service.get_warehouse(3)

    def test_filter_materials(self):
        materials = [
            Brick(BrickForm.SOLID, 15, 1000, 27, name="Red brick"),
            Beam(12, 4, True, 3000, 27, name="Pine beam"),
            MineralWool(10, WoolForm.ROLLED, 500, 27, name="Glass wool"),
        ]
        f = WarehouseService.filter_materials
        assert [m.name for m in f(materials, name="BRICK")] == ["Red brick"]
        assert [m.name for m in f(materials, min_price=600, max_price=3000)] == [
            "Red brick", "Pine beam"]
        assert [m.name for m in f(materials, kind=MaterialKind.INSULATION)] == ["Glass wool"]
        assert f(materials) == materials
