# timetable_service.py
import logging
from collections import defaultdict
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update

from schooldesk.core.errors import DuplicateResource, NotFoundError, ScheduleConflict
from schooldesk.models.class_ import Class
from schooldesk.models.subject import Subject
from schooldesk.models.teacher import Teacher
from schooldesk.models.timetable import TimetableConfig, TimetableEntry
from schooldesk.schemas.common.status import RecordStatus
from schooldesk.schemas.timetable import (
    PeriodDefinition,
    TimetableConfigCreate,
    TimetableConfigUpdate,
    TimetableEntryCreate,
    TimetableEntryResponse,
    TimetableEntryUpdate,
)
from schooldesk.services.base_service import TenantService, dump_values
from schooldesk.utils.identifiers import TIMETABLE_CONFIG_PREFIX, TIMETABLE_ENTRY_PREFIX, generate_sequential_id

logger = logging.getLogger("schooldesk.services.timetable")


def serialize_periods(periods: List[PeriodDefinition]) -> List[Dict[str, Any]]:
    return [
        {
            "periodNumber": period.period_number,
            "name": period.name,
            "startTime": period.start_time.strftime("%H:%M"),
            "endTime": period.end_time.strftime("%H:%M"),
            "type": period.type.value,
        }
        for period in sorted(periods, key=lambda p: p.period_number)
    ]


class TimetableService(TenantService):

    # Configuration

    async def create_config(self, data: TimetableConfigCreate) -> TimetableConfig:
        result = await self.db.execute(
            select(TimetableConfig.id).where(TimetableConfig.academic_year == data.academic_year)
        )
        if result.scalar_one_or_none() is not None:
            raise DuplicateResource("Timetable configuration for this academic year already exists")

        # A new configuration becomes the only active one
        await self.db.execute(update(TimetableConfig).values(is_active=False))
        config = TimetableConfig(
            config_id=await generate_sequential_id(self.db, TimetableConfig.config_id, TIMETABLE_CONFIG_PREFIX),
            academic_year=data.academic_year,
            working_days=[day.value for day in data.working_days],
            periods=serialize_periods(data.periods),
            is_active=True,
        )
        self.db.add(config)
        await self._commit("Timetable configuration for this academic year already exists")
        logger.info(f"Created timetable config {config.config_id} for {config.academic_year}")
        return config

    async def get_active_config(self, required: bool = True) -> Optional[TimetableConfig]:
        result = await self.db.execute(
            select(TimetableConfig).where(TimetableConfig.is_active.is_(True)).limit(1)
        )
        config = result.scalar_one_or_none()
        if config is None and required:
            raise NotFoundError("No active timetable configuration found")
        return config

    async def list_configs(self) -> List[TimetableConfig]:
        result = await self.db.execute(select(TimetableConfig).order_by(TimetableConfig.academic_year.desc()))
        return list(result.scalars().all())

    async def get_config(self, config_id: str) -> TimetableConfig:
        result = await self.db.execute(select(TimetableConfig).where(TimetableConfig.config_id == config_id))
        config = result.scalar_one_or_none()
        if config is None:
            raise NotFoundError("Timetable configuration not found", details={"config_id": config_id})
        return config

    async def activate_config(self, config_id: str) -> TimetableConfig:
        config = await self.get_config(config_id)
        await self.db.execute(
            update(TimetableConfig).where(TimetableConfig.config_id != config_id).values(is_active=False)
        )
        config.is_active = True
        await self._commit()
        return config

    async def update_config(self, config_id: str, data: TimetableConfigUpdate) -> TimetableConfig:
        config = await self.get_config(config_id)
        if data.working_days is not None:
            config.working_days = [day.value for day in data.working_days]
        if data.periods is not None:
            config.periods = serialize_periods(data.periods)
        await self._commit()
        return config

    # Entries

    async def get_entry(self, entry_id: str) -> TimetableEntry:
        result = await self.db.execute(select(TimetableEntry).where(TimetableEntry.entry_id == entry_id))
        entry = result.scalar_one_or_none()
        if entry is None:
            raise NotFoundError("Timetable entry not found", details={"entry_id": entry_id})
        return entry

    async def _ensure_references(self, values: Dict[str, Any]) -> None:
        class_ = (await self._lookup(Class.class_id, [values["class_id"]])).get(values["class_id"])
        if class_ is None:
            raise NotFoundError("Class not found", details={"class_id": values["class_id"]})
        if not any(section.get("sectionId") == values["section_id"] for section in class_.sections or []):
            raise NotFoundError("Section not found", details={"section_id": values["section_id"]})
        if not await self._lookup(Subject.subject_id, [values["subject_id"]]):
            raise NotFoundError("Subject not found", details={"subject_id": values["subject_id"]})
        if not await self._lookup(Teacher.teacher_id, [values["teacher_id"]]):
            raise NotFoundError("Teacher not found", details={"teacher_id": values["teacher_id"]})

    async def _find_conflicts(self, values: Dict[str, Any], exclude_entry_id: Optional[str] = None) -> List[Dict]:
        """Active entries already holding the teacher, room or class section in this slot"""
        stmt = select(TimetableEntry).where(
            TimetableEntry.status == RecordStatus.ACTIVE.value,
            TimetableEntry.day_of_week == values["day_of_week"],
            TimetableEntry.period_number == values["period_number"],
        )
        if exclude_entry_id:
            stmt = stmt.where(TimetableEntry.entry_id != exclude_entry_id)
        occupied = list((await self.db.execute(stmt)).scalars().all())
        if not occupied:
            return []

        teachers = await self._lookup(Teacher.teacher_id, [values["teacher_id"]])
        classes = await self._lookup(Class.class_id, [entry.class_id for entry in occupied])
        subjects = await self._lookup(Subject.subject_id, [entry.subject_id for entry in occupied])

        def class_name(entry):
            return getattr(classes.get(entry.class_id), "name", None) or "another class"

        def subject_name(entry, fallback):
            return getattr(subjects.get(entry.subject_id), "name", None) or fallback

        conflicts = []
        for entry in occupied:
            if entry.teacher_id == values["teacher_id"]:
                teacher = teachers.get(values["teacher_id"])
                conflicts.append({
                    "type": "teacher",
                    "message": f'Teacher "{getattr(teacher, "first_name", None) or values["teacher_id"]}" '
                               f'is already assigned to {class_name(entry)} ({subject_name(entry, "subject")}) '
                               f'at this time',
                    "entryId": entry.entry_id,
                })
                break
        if values.get("room_id"):
            for entry in occupied:
                if entry.room_id == values["room_id"]:
                    conflicts.append({
                        "type": "room",
                        "message": f"Room is already booked by {class_name(entry)} at this time",
                        "entryId": entry.entry_id,
                    })
                    break
        for entry in occupied:
            if entry.class_id == values["class_id"] and entry.section_id == values["section_id"]:
                conflicts.append({
                    "type": "class",
                    "message": f"This class/section already has {subject_name(entry, 'another subject')} at this time",
                    "entryId": entry.entry_id,
                })
                break
        return conflicts

    async def _add_entry(self, data: TimetableEntryCreate) -> TimetableEntry:
        values = dump_values(data)
        await self._ensure_references(values)
        conflicts = await self._find_conflicts(values)
        if conflicts:
            raise ScheduleConflict(conflicts=conflicts)

        entry = TimetableEntry(
            entry_id=await generate_sequential_id(self.db, TimetableEntry.entry_id, TIMETABLE_ENTRY_PREFIX),
            **values
        )
        self.db.add(entry)
        # Later entries of the same batch must see this one
        await self.db.flush()
        return entry

    async def create_entry(self, data: TimetableEntryCreate) -> TimetableEntry:
        entry = await self._add_entry(data)
        await self._commit()
        logger.info(f"Created timetable entry {entry.entry_id} in school {self.school_id}")
        return entry

    async def bulk_create_entries(self, entries: List[TimetableEntryCreate]) -> Dict[str, List]:
        created: List[TimetableEntry] = []
        failed: List[Dict[str, Any]] = []
        for index, data in enumerate(entries):
            try:
                created.append(await self._add_entry(data))
            except ScheduleConflict as e:
                failed.append({"index": index, "reason": e.message, "conflicts": e.details["conflicts"]})
            except NotFoundError as e:
                failed.append({"index": index, "reason": e.message, "conflicts": []})
        await self._commit()
        logger.info(f"Bulk timetable import: {len(created)} created, {len(failed)} failed")
        return {"created": created, "failed": failed}

    async def update_entry(self, entry_id: str, data: TimetableEntryUpdate) -> TimetableEntry:
        entry = await self.get_entry(entry_id)
        changes = dump_values(data, exclude_unset=True, exclude_none=True)
        values = {
            field: changes.get(field, getattr(entry, field))
            for field in ("class_id", "section_id", "subject_id", "teacher_id", "day_of_week", "period_number", "room_id")
        }
        if changes.keys() & {"class_id", "section_id", "subject_id", "teacher_id"}:
            await self._ensure_references(values)
        conflicts = await self._find_conflicts(values, exclude_entry_id=entry_id)
        if conflicts:
            raise ScheduleConflict(conflicts=conflicts)

        for field, value in changes.items():
            setattr(entry, field, value)
        await self._commit()
        return entry

    async def delete_entry(self, entry_id: str) -> TimetableEntry:
        entry = await self.get_entry(entry_id)
        entry.status = RecordStatus.INACTIVE.value
        await self._commit()
        return entry

    # Views

    async def _active_entries(self, *criteria) -> List[TimetableEntry]:
        stmt = (
            select(TimetableEntry)
            .where(TimetableEntry.status == RecordStatus.ACTIVE.value, *criteria)
            .order_by(TimetableEntry.day_of_week, TimetableEntry.period_number)
        )
        return list((await self.db.execute(stmt)).scalars().all())

    async def _enrich(self, entries: List[TimetableEntry]) -> List[TimetableEntryResponse]:
        teachers = await self._lookup(Teacher.teacher_id, [entry.teacher_id for entry in entries])
        subjects = await self._lookup(Subject.subject_id, [entry.subject_id for entry in entries])
        classes = await self._lookup(Class.class_id, [entry.class_id for entry in entries])

        enriched = []
        for entry in entries:
            item = TimetableEntryResponse.model_validate(entry)
            teacher = teachers.get(entry.teacher_id)
            class_ = classes.get(entry.class_id)
            section = class_.find_section(entry.section_id) if class_ else None
            item.teacher_name = teacher.full_name if teacher else None
            item.subject_name = getattr(subjects.get(entry.subject_id), "name", None)
            item.class_name = getattr(class_, "name", None)
            item.section_name = section.get("name") if section else None
            enriched.append(item)
        return enriched

    async def class_timetable(self, class_id: str, section_id: Optional[str] = None) -> Dict[str, Any]:
        criteria = [TimetableEntry.class_id == class_id]
        if section_id:
            criteria.append(TimetableEntry.section_id == section_id)
        return {
            "config": await self.get_active_config(required=False),
            "entries": await self._enrich(await self._active_entries(*criteria)),
        }

    async def teacher_timetable(self, teacher_id: str) -> Dict[str, Any]:
        return {
            "config": await self.get_active_config(required=False),
            "entries": await self._enrich(await self._active_entries(TimetableEntry.teacher_id == teacher_id)),
        }

    async def entries_by_day(self, day_of_week: str) -> List[TimetableEntryResponse]:
        return await self._enrich(await self._active_entries(TimetableEntry.day_of_week == day_of_week))

    async def teacher_free_periods(self, teacher_id: str) -> Dict[str, List[Dict]]:
        config = await self.get_active_config()
        busy = {entry.slot for entry in await self._active_entries(TimetableEntry.teacher_id == teacher_id)}
        return {
            day: [
                period for period in config.regular_periods()
                if (day, period.get("periodNumber")) not in busy
            ]
            for day in config.working_days or []
        }

    async def free_teachers(self, day_of_week: str, period_number: int) -> List[Teacher]:
        busy = select(TimetableEntry.teacher_id).where(
            TimetableEntry.status == RecordStatus.ACTIVE.value,
            TimetableEntry.day_of_week == day_of_week,
            TimetableEntry.period_number == period_number,
        )
        result = await self.db.execute(
            select(Teacher)
            .where(Teacher.status == RecordStatus.ACTIVE.value, Teacher.teacher_id.not_in(busy))
            .order_by(Teacher.teacher_id)
        )
        return list(result.scalars().all())

    async def conflict_report(self) -> Dict[str, Any]:
        """Slots where one teacher or one room is booked more than once"""
        entries = await self._active_entries()
        teacher_slots: Dict[tuple, List[TimetableEntry]] = defaultdict(list)
        room_slots: Dict[tuple, List[TimetableEntry]] = defaultdict(list)
        for entry in entries:
            teacher_slots[(entry.teacher_id, *entry.slot)].append(entry)
            if entry.room_id:
                room_slots[(entry.room_id, *entry.slot)].append(entry)

        teachers = await self._lookup(Teacher.teacher_id, [key[0] for key in teacher_slots])
        conflicts = []
        for (teacher_id, day, period), group in teacher_slots.items():
            if len(group) > 1:
                name = getattr(teachers.get(teacher_id), "first_name", None) or teacher_id
                conflicts.append({
                    "type": "teacher",
                    "description": f'Teacher "{name}" assigned to multiple classes',
                    "entries": [entry.entry_id for entry in group],
                    "day_of_week": day,
                    "period_number": period,
                })
        for (room_id, day, period), group in room_slots.items():
            if len(group) > 1:
                conflicts.append({
                    "type": "room",
                    "description": f'Room "{room_id}" double-booked',
                    "entries": [entry.entry_id for entry in group],
                    "day_of_week": day,
                    "period_number": period,
                })
        return {"total_conflicts": len(conflicts), "conflicts": conflicts}
