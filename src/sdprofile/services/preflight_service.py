"""Preflight checks run on a profile before it is exported."""

import logging

from sdprofile.models import (
    ControllerKind,
    PreflightIssue,
    PreflightReport,
    PreflightSeverity,
    ProfileArchive,
    ZERO_UUID,
    folder_profile_id,
    normalize_page_id,
    plugin_uuid,
    referenced_image_paths,
)

logger = logging.getLogger(__name__)

MAX_ISSUE_COUNT = 200


class _IssueList:
    """Accumulates unique issues up to MAX_ISSUE_COUNT."""

    def __init__(self):
        self.issues: list[PreflightIssue] = []
        self._seen: set[str] = set()

    def add(self, severity: PreflightSeverity, code: str, message: str) -> None:
        if len(self.issues) >= MAX_ISSUE_COUNT:
            return
        issue = PreflightIssue(severity=severity, code=code, message=message)
        if issue.dedupe_key in self._seen:
            return
        self._seen.add(issue.dedupe_key)
        self.issues.append(issue)


class PreflightValidator:
    """
    Read-only consistency scan of a profile.

    Checks, in order:
    - the active page exists
    - manifest page references (listed, default, current) resolve to a
      loaded page or an existing page folder
    - every action has a plugin uuid, folder actions point at an existing
      page and referenced images resolve
    - the package's RequiredPlugins matches the plugins actions use

    The scan never modifies the profile.
    """

    def validate(self, profile: ProfileArchive) -> PreflightReport:
        issues = _IssueList()
        known_page_ids = {normalize_page_id(page_id) for page_id in profile.all_page_ids}

        def page_resolves(page_id: str) -> bool:
            return page_id in known_page_ids or profile.existing_page_directory(page_id) is not None

        if normalize_page_id(profile.active_page_id) not in known_page_ids:
            issues.add(
                PreflightSeverity.ERROR,
                "ACTIVE_PAGE_MISSING",
                "Active page is missing from loaded page set.",
            )

        pages = profile.profile_manifest.pages
        for listed in (pages.pages if pages is not None else None) or []:
            normalized = normalize_page_id(listed)
            if normalized and not page_resolves(normalized):
                issues.add(
                    PreflightSeverity.WARNING,
                    "PAGE_LISTED_MISSING",
                    f"Manifest lists missing page {listed}.",
                )

        default_page_id = normalize_page_id(pages.default if pages is not None else None)
        if default_page_id and not page_resolves(default_page_id):
            issues.add(
                PreflightSeverity.WARNING,
                "DEFAULT_PAGE_MISSING",
                f"Manifest default page is missing: {default_page_id}.",
            )

        current_page_id = normalize_page_id(pages.current if pages is not None else None)
        if current_page_id and current_page_id != ZERO_UUID and not page_resolves(current_page_id):
            issues.add(
                PreflightSeverity.WARNING,
                "CURRENT_PAGE_MISSING",
                f"Manifest current page is missing: {current_page_id}.",
            )

        required_plugins = {
            plugin.strip() for plugin in profile.package_manifest.required_plugins or [] if plugin.strip()
        }
        referenced_plugins: set[str] = set()

        for page_id in profile.all_page_ids:
            for controller in (ControllerKind.KEYPAD, ControllerKind.ENCODER):
                actions = profile.get_actions(controller, page_id)
                for coordinate in sorted(actions):
                    action = actions[coordinate]
                    slot_label = f"{controller.value} {coordinate} on page {page_id}"

                    plugin = (plugin_uuid(action) or "").strip()
                    if plugin:
                        referenced_plugins.add(plugin)
                    else:
                        issues.add(
                            PreflightSeverity.WARNING,
                            "PLUGIN_UUID_MISSING",
                            f"Action at {slot_label} does not include Plugin.UUID.",
                        )

                    folder_id = (folder_profile_id(action) or "").strip()
                    if folder_id and not page_resolves(normalize_page_id(folder_id)):
                        issues.add(
                            PreflightSeverity.ERROR,
                            "FOLDER_TARGET_MISSING",
                            f"Folder action at {slot_label} references missing page {folder_id}.",
                        )

                    for image_ref in sorted(referenced_image_paths(action)):
                        if profile.resolve_image_path(image_ref, page_id) is None:
                            issues.add(
                                PreflightSeverity.ERROR,
                                "IMAGE_REF_MISSING",
                                f"Action at {slot_label} references missing image {image_ref}.",
                            )

        for plugin in sorted(referenced_plugins - required_plugins):
            issues.add(
                PreflightSeverity.WARNING,
                "REQUIRED_PLUGIN_MISSING",
                f"Plugin {plugin} is used but not listed in package RequiredPlugins.",
            )

        for plugin in sorted(required_plugins - referenced_plugins):
            issues.add(
                PreflightSeverity.INFO,
                "REQUIRED_PLUGIN_UNUSED",
                f"RequiredPlugins contains {plugin} but no action currently references it.",
            )

        report = PreflightReport(issues=issues.issues)
        logger.debug(f"Preflight profile={profile.display_name} result={report.summary}")
        return report
