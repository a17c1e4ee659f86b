import sys
import logging
from pathlib import Path

from eonengine.errors import DataLoadError
from eontamers.data.registry import BUNDLED_DATA_DIR, GameDatabase


def main():
    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger("DataVerification")

    data_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else BUNDLED_DATA_DIR

    try:
        logger.info(f"Loading database from {data_dir}...")
        db = GameDatabase.load(data_dir)
    except DataLoadError as e:
        logger.error(f"VERIFICATION FAILED: {e}")
        sys.exit(1)

    problems = []

    # Cross-table references
    for species in db.species.values():
        for rule in species.evolutions:
            if rule.target_species_id not in db.species:
                problems.append(f"{species.id}: evolves into unknown species {rule.target_species_id}")
            if rule.required_item_id and rule.required_item_id not in db.items:
                problems.append(f"{species.id}: evolution needs unknown item {rule.required_item_id}")
            if rule.required_node_id and db.node(species.id, rule.required_node_id) is None:
                problems.append(f"{species.id}: evolution needs unknown node {rule.required_node_id}")
        for entry in species.loot_table:
            if entry.item_id not in db.items:
                problems.append(f"{species.id}: drops unknown item {entry.item_id}")

    for tree in db.skill_trees.values():
        if tree.id not in db.species:
            problems.append(f"skill tree for unknown species {tree.id}")
        for node in tree.nodes:
            if node.effect.skill_id and node.effect.skill_id not in db.skills:
                problems.append(f"{tree.id}/{node.id}: grants unknown skill {node.effect.skill_id}")

    for item in db.items.values():
        for species_id in item.hatch_pool:
            if species_id not in db.species:
                problems.append(f"{item.id}: hatches unknown species {species_id}")

    for quest in db.quests.values():
        for prerequisite in quest.prerequisites:
            if prerequisite not in db.quests:
                problems.append(f"{quest.id}: unknown prerequisite {prerequisite}")
        for stack in quest.rewards.items:
            if db.item_or_gear(stack.item_id) is None:
                problems.append(f"{quest.id}: rewards unknown item {stack.item_id}")

    for milestone in db.milestones.values():
        unlock = milestone.unlock_skill
        skill_ids = unlock.values() if isinstance(unlock, dict) else [unlock] if unlock else []
        for skill_id in skill_ids:
            if skill_id not in db.support_skills:
                problems.append(f"{milestone.id}: unlocks unknown support skill {skill_id}")

    for problem in problems:
        logger.error(problem)

    if problems:
        logger.error(f"VERIFICATION FAILED: {len(problems)} problem(s)")
        sys.exit(1)

    logger.info(
        f"VERIFICATION SUCCESSFUL: {len(db.species)} species, {len(db.items)} items, "
        f"{len(db.quests)} quests loaded and cross-checked."
    )


if __name__ == "__main__":
    main()
