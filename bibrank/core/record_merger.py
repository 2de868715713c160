"""
Record merger module
Field and creator level reconciliation of two bibliographic records
"""

from loguru import logger

from .record import AUTHOR, EDITOR, Creator, Record
from .schema import get_type_fields


class RecordMerger:
    """Merge records under fill-empty-or-override-if-priority rules"""

    def merge(self, base: Record, other: Record, other_priority: bool = False) -> Record:
        """
        Merge other into base

        A field of base's type takes other's value when other's value is
        non-empty and either base's value is empty or other_priority is set.

        The primary creator list (other's when other_priority, else base's)
        is kept as is. Secondary authors are appended only if the primary
        list has no author at all; the same holds for editors.

        Args:
            base: Record to update in place
            other: Record to take values from
            other_priority: Let other's non-empty values override base's

        Returns:
            The updated base record
        """
        changed = []
        for field_name in get_type_fields(base.type):
            new_value = other.get_field(field_name)
            if not new_value:
                continue

            old_value = base.get_field(field_name)
            if not old_value or other_priority:
                if old_value != new_value:
                    changed.append(field_name)
                base.set_field(field_name, new_value)

        base.creators = self.merge_creators(base, other, other_priority)

        if changed:
            logger.debug(f"Merged fields into '{base.title}': {', '.join(changed)}")

        return base

    def merge_creators(self, base: Record, other: Record, other_priority: bool = False) -> list[Creator]:
        """Merged creator list of base and other"""
        if other_priority:
            primary, secondary = other.creators, base.creators
        else:
            primary, secondary = base.creators, other.creators

        need_author = not any(c.role == AUTHOR for c in primary)
        need_editor = not any(c.role == EDITOR for c in primary)

        creators = list(primary)
        for creator in secondary:
            if (creator.role == AUTHOR and need_author) or (creator.role == EDITOR and need_editor):
                creators.append(creator)

        return creators

    def create_divergent_record(self, base: Record, new_type: str) -> Record:
        """
        Create an empty record of another type next to base

        The new record lives in base's library and collections; it is not
        saved.

        Args:
            base: Record the new one is derived from
            new_type: Record type of the new record

        Returns:
            New unsaved record
        """
        return Record(
            type=new_type,
            library_id=base.library_id,
            collections=list(base.collections),
        )
