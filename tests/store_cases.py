import io
from datetime import date

from psedata.data.dialects import HISTORICAL
from psedata.data.engines import Engine
from psedata.data.errors import (
    ClosedError,
    NotFoundError,
    ParseError,
    ProvisionError,
    StoreStateError,
    WriteError,
)
from psedata.data.importer import RecordReader
from psedata.data.models import ConnectionInfo, DailyRecord
from psedata.data.store import Store

CONN_INFO = ConnectionInfo(
    host="localhost",
    port=5432,
    user="pse_test",
    password="pse_test",
    database="pse_data_test",
)

GENERIC = DailyRecord(
    symbol="AAA",
    date=date(1980, 4, 20),
    open=10.0,
    high=12.0,
    low=9.1,
    close=11.0,
    volume=100,
)

FIVE_ROWS_BAD_THIRD = (
    "<NAME>,<DATE>,<OPEN>,<HIGH>,<LOW>,<CLOSE>,<VOL>,\n"
    "SEVN,20131213,101.00000,101.00000,99.50000,100.00000,4940,\n"
    "SEVN,20131217,100.00000,100.00000,100.00000,100.00000,740,\n"
    "SEVN,2013-12-18,99.50000,99.50000,99.50000,99.50000,90,\n"
    "SEVN,20131219,99.50000,99.50000,99.50000,99.50000,120,\n"
    "SEVN,20131220,99.00000,99.50000,98.50000,99.00000,300,\n"
)


class StoreCases:
    """
    Behaviour shared by every engine. Subclasses mix this into a TestCase and
    set ``self.engine`` and ``self.info`` in setUp before calling ``_create``.
    """

    engine: Engine
    info: ConnectionInfo

    def _create(self, **kwargs) -> Store:
        store = Store(self.info, self.engine).provision(**kwargs)
        self.addCleanup(store.close)
        return store

    def test_provision_opens_store(self):
        store = Store(self.info, self.engine)
        self.assertEqual(store.state, "unprovisioned")
        self.assertIs(store.provision(), store)
        self.assertEqual(store.state, "open")
        store.close()
        self.assertTrue(store.closed)

    def test_provision_existing_database_fails(self):
        self._create()
        second = Store(self.info, self.engine)
        with self.assertRaises(ProvisionError):
            second.provision()
        self.assertEqual(second.state, "unprovisioned")
        with self.assertRaises(StoreStateError):
            second.find_all("AAA")

    def test_insert_then_find(self):
        store = self._create()
        store.insert(GENERIC)
        saved = store.find("AAA", date(1980, 4, 20))
        self.assertEqual(str(saved), str(GENERIC))
        self.assertEqual(saved, GENERIC)

    def test_find_accepts_iso_string(self):
        store = self._create()
        store.insert(GENERIC)
        self.assertEqual(store.find("AAA", "1980-04-20").volume, 100)

    def test_find_missing_raises_not_found(self):
        store = self._create()
        store.insert(GENERIC)
        with self.assertRaises(NotFoundError):
            store.find("AAA", date(1980, 4, 21))
        with self.assertRaises(LookupError):
            store.find("BBB", date(1980, 4, 20))

    def test_find_all_for_symbol(self):
        store = self._create()
        store.insert(GENERIC)
        store.insert(DailyRecord("AAA", date(1980, 4, 21), 11.0, 11.5, 10.5, 11.2, 250))
        store.insert(DailyRecord("BBB", date(1980, 4, 21), 1.0, 1.0, 1.0, 1.0, 1))
        results = store.find_all("AAA")
        self.assertEqual(len(results), 2)
        self.assertEqual({r.date for r in results}, {date(1980, 4, 20), date(1980, 4, 21)})
        self.assertEqual(store.find_all("CCC"), [])

    def test_duplicates_are_not_deduplicated(self):
        store = self._create()
        store.insert(GENERIC)
        store.insert(GENERIC)
        self.assertEqual(len(store.find_all("AAA")), 2)
        self.assertEqual(str(store.find("AAA", GENERIC.date)), str(GENERIC))

    def test_import_records(self):
        store = self._create()
        first = DailyRecord("AA1", GENERIC.date, 10.0, 12.0, 9.1, 11.0, 100)
        second = DailyRecord("AA2", GENERIC.date, 10.0, 12.0, 9.1, 11.0, 100)
        self.assertEqual(store.import_all([first, second]), 2)
        self.assertEqual(str(store.find_all("AA1")[0]), str(first))
        self.assertEqual(str(store.find_all("AA2")[0]), str(second))

    def test_import_from_reader(self):
        store = self._create()
        reader = RecordReader(io.BytesIO(FIVE_ROWS_BAD_THIRD.replace("2013-12-18", "20131218").encode()), HISTORICAL)
        self.assertEqual(store.import_all(reader), 5)
        self.assertEqual(len(store.find_all("SEVN")), 5)
        self.assertEqual(store.find("SEVN", date(2013, 12, 13)).low, 99.5)

    def test_import_stops_at_parse_error_and_keeps_earlier_rows(self):
        store = self._create()
        reader = RecordReader(io.BytesIO(FIVE_ROWS_BAD_THIRD.encode()), HISTORICAL)
        with self.assertRaises(ParseError) as ctx:
            store.import_all(reader)
        self.assertEqual(ctx.exception.field, "date")
        self.assertEqual(ctx.exception.value, "2013-12-18")
        self.assertEqual(len(store.find_all("SEVN")), 2)

    def test_import_stops_at_write_error_and_keeps_earlier_rows(self):
        store = self._create()
        broken = DailyRecord(None, GENERIC.date, 1.0, 1.0, 1.0, 1.0, 1)  # type: ignore[arg-type]
        records = [GENERIC, GENERIC, broken, GENERIC, GENERIC]
        with self.assertRaises(WriteError) as ctx:
            store.import_all(records)
        self.assertIsNotNone(ctx.exception.__cause__)
        self.assertEqual(len(store.find_all("AAA")), 2)

    def test_insert_failure_raises_write_error(self):
        store = self._create()
        with self.assertRaises(WriteError):
            store.insert(DailyRecord("AAA", GENERIC.date, 1.0, 1.0, 1.0, 1.0, None))  # type: ignore[arg-type]
        store.insert(GENERIC)
        self.assertEqual(len(store.find_all("AAA")), 1)

    def test_symbol_longer_than_five_characters_is_rejected(self):
        store = self._create()
        with self.assertRaises(WriteError):
            store.insert(DailyRecord("TOOLONG", GENERIC.date, 1.0, 1.0, 1.0, 1.0, 1))
        self.assertEqual(store.find_all("TOOLONG"), [])
        store.insert(DailyRecord("FIVEC", GENERIC.date, 1.0, 1.0, 1.0, 1.0, 1))
        self.assertEqual(len(store.find_all("FIVEC")), 1)

    def test_operations_after_close_fail_fast(self):
        store = self._create()
        store.insert(GENERIC)
        store.close()
        store.close()
        with self.assertRaises(ClosedError):
            store.insert(GENERIC)
        with self.assertRaises(ClosedError):
            store.find("AAA", GENERIC.date)
        with self.assertRaises(ClosedError):
            store.find_all("AAA")
        with self.assertRaises(ClosedError):
            store.import_all([GENERIC])
        with self.assertRaises(ClosedError):
            store.provision()

    def test_operations_before_provision_are_rejected(self):
        store = Store(self.info, self.engine)
        with self.assertRaises(StoreStateError):
            store.insert(GENERIC)
        with self.assertRaises(StoreStateError):
            store.find("AAA", GENERIC.date)
        store.close()
        with self.assertRaises(ClosedError):
            store.provision()

    def test_provision_twice_is_rejected(self):
        store = self._create()
        with self.assertRaises(StoreStateError):
            store.provision()

    def test_context_manager_closes(self):
        with Store(self.info, self.engine).provision() as store:
            store.insert(GENERIC)
        self.assertTrue(store.closed)
