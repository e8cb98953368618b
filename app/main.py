from __future__ import annotations

import sys
from datetime import date
from pathlib import Path
from typing import Any

import streamlit as st

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app.helpers import (
    browse_page_for_filters,
    days_remaining,
    format_amount,
    format_date,
    notification_level,
    requirements_from_text,
    status_badge,
)
from src.auth.session import Session
from src.catalog.browse import (
    SORT_KEYS,
    admin_overview,
    applications_frame,
    browse_scholarships,
    featured_scholarships,
    platform_stats,
    school_overview,
)
from src.models.entities import Scholarship, SchoolProfile, StudentProfile, User, utc_now
from src.models.notifications import Notifier
from src.repository.collections import ApplicationRepository, ScholarshipRepository, UserRepository
from src.seed.sample_data import initialize_sample_data
from src.store.kv_store import DEFAULT_STORE_DIR, JsonFileStore, OverlayStore
from src.workflow.applications import (
    ESSAY_MIN_CHARS,
    apply_block_reasons,
    review_application,
    submit_application,
)
from src.workflow.documents import (
    Attachment,
    add_profile_document,
    decode_document,
    remove_profile_document,
)
from src.workflow.scholarships import create_scholarship, delete_scholarship, toggle_scholarship
from src.workflow.users import approve_user, block_user

PAGES = ("Home", "Scholarships", "Dashboard", "Login", "Register")
UPLOAD_TYPES = ["pdf", "doc", "docx", "jpg", "jpeg", "png"]
_BLOCK_REASON_TEXT = {
    "NOT_AUTHENTICATED": "Login as a student to apply.",
    "NOT_STUDENT": "Only student accounts can apply.",
    "NOT_APPROVED": "Your account is pending approval.",
    "DEADLINE_PASSED": "This scholarship has expired.",
    "ALREADY_APPLIED": "You have already applied for this scholarship.",
    "SCHOLARSHIP_NOT_FOUND": "Scholarship not found.",
}


@st.cache_resource(show_spinner=False)
def _get_store(store_dir_text: str) -> JsonFileStore:
    store = JsonFileStore(Path(store_dir_text))
    initialize_sample_data(store)
    return store


def _ensure_session_state() -> None:
    store = _get_store(str(DEFAULT_STORE_DIR))
    if "notifier" not in st.session_state:
        st.session_state.notifier = Notifier()
    if "auth_session" not in st.session_state:
        # Each visitor keeps its own signed-in user; collections stay shared.
        st.session_state.auth_session = Session(OverlayStore(store), notifier=st.session_state.notifier)
    st.session_state.setdefault("page", "Home")
    st.session_state.setdefault("selected_scholarship_id", None)
    st.session_state.setdefault("browse_page", 1)


def _repositories() -> tuple[ScholarshipRepository, ApplicationRepository, UserRepository]:
    session: Session = st.session_state.auth_session
    scholarships = ScholarshipRepository(session.store)
    applications = ApplicationRepository(session.store, scholarships=scholarships)
    return scholarships, applications, session.users


def _render_notifications() -> None:
    notifier: Notifier = st.session_state.notifier
    for notification in notifier.drain():
        render = getattr(st, notification_level(notification))
        render(f"**{notification.title}**: {notification.description}")


def _go_to(page: str, *, scholarship_id: str | None = None) -> None:
    st.session_state.page = page
    if scholarship_id is not None:
        st.session_state.selected_scholarship_id = scholarship_id
    st.rerun()


def _render_scholarship_card(scholarship: Scholarship, *, key_prefix: str) -> None:
    with st.container(border=True):
        st.markdown(f"**{scholarship.name}**")
        st.caption(scholarship.university_name)
        st.write(f"{format_amount(scholarship.amount)} · Deadline {format_date(scholarship.deadline)}")
        st.caption(f"{scholarship.application_count} applications")
        if st.button("View details", key=f"{key_prefix}_{scholarship.id}"):
            _go_to("Scholarships", scholarship_id=scholarship.id)


def _render_home() -> None:
    scholarships, applications, _ = _repositories()
    all_scholarships = scholarships.list_all()
    stats = platform_stats(all_scholarships, applications.list_all())

    st.header("Find the scholarship that funds your future")
    total_col, amount_col, apps_col = st.columns(3)
    total_col.metric("Scholarships", stats["total_scholarships"])
    amount_col.metric("Total funding", format_amount(stats["total_amount"]))
    apps_col.metric("Applications", stats["total_applications"])

    st.subheader("Featured Scholarships")
    featured = featured_scholarships(all_scholarships)
    if not featured:
        st.info("No open scholarships right now.")
        return
    columns = st.columns(3)
    for index, scholarship in enumerate(featured):
        with columns[index % 3]:
            _render_scholarship_card(scholarship, key_prefix="featured")


def _render_scholarship_detail(scholarship_id: str) -> None:
    session: Session = st.session_state.auth_session
    scholarships, applications, _ = _repositories()
    scholarship = scholarships.get_by_id(scholarship_id)
    if st.button("← Back to scholarships"):
        st.session_state.selected_scholarship_id = None
        st.rerun()
    if scholarship is None:
        st.warning("Scholarship not found.")
        return

    now = utc_now()
    st.header(scholarship.name)
    st.caption(scholarship.university_name)
    amount_col, deadline_col, created_col = st.columns(3)
    amount_col.metric("Award", format_amount(scholarship.amount))
    remaining = days_remaining(scholarship.deadline, now)
    deadline_col.metric(
        "Deadline",
        format_date(scholarship.deadline),
        delta=None if remaining is None else f"{remaining} days left",
    )
    created_col.metric("Posted", format_date(scholarship.created_at))

    st.subheader("About")
    st.write(scholarship.description)
    st.subheader("Eligibility")
    st.write(scholarship.eligibility_criteria)
    if scholarship.requirements:
        st.subheader("Requirements")
        for requirement in scholarship.requirements:
            st.write(f"- {requirement}")

    reasons = apply_block_reasons(session, scholarship, applications, now=now)
    if reasons:
        if "DEADLINE_PASSED" in reasons:
            st.error("This scholarship has expired.")
        st.info(_BLOCK_REASON_TEXT.get(reasons[0], "You cannot apply for this scholarship."))
        return

    st.subheader(f"Apply for {scholarship.name}")
    with st.form("application_form", clear_on_submit=False):
        essay = st.text_area(
            "Personal Essay *",
            placeholder="Tell us about yourself, your goals, and why you deserve this scholarship...",
            height=220,
        )
        st.caption(f"Minimum {ESSAY_MIN_CHARS} characters.")
        uploads = st.file_uploader("Supporting Documents", type=UPLOAD_TYPES, accept_multiple_files=True)
        st.caption("Keep files small: documents are stored inline with the application.")
        submitted = st.form_submit_button("Submit Application", type="primary")
    if submitted:
        attachments = [
            Attachment(name=item.name, payload=item.getvalue(), mime_type=item.type)
            for item in uploads or []
        ]
        try:
            created = submit_application(
                session, scholarships, applications, scholarship.id, essay, attachments
            )
        except Exception as exc:
            st.error(f"Submission Failed: {exc}")
            return
        if created is not None:
            st.rerun()


def _render_scholarships() -> None:
    selected_id = st.session_state.selected_scholarship_id
    if selected_id:
        _render_scholarship_detail(selected_id)
        return

    scholarships, _, _ = _repositories()
    st.header("Browse Scholarships")
    search_col, sort_col = st.columns([3, 1])
    search_term = search_col.text_input("Search by name, university or description")
    sort_by = sort_col.selectbox("Sort by", options=SORT_KEYS, index=0)
    filters = (search_term, sort_by)
    st.session_state.browse_page = browse_page_for_filters(
        st.session_state.browse_page, filters, st.session_state.get("browse_filters")
    )
    st.session_state.browse_filters = filters

    result = browse_scholarships(
        scholarships.list_all(),
        search_term=search_term,
        sort_by=sort_by,
        page=int(st.session_state.browse_page),
    )
    st.caption(f"Discover {result.total} scholarship opportunities")
    if not result.items:
        st.info("No scholarships found. Try adjusting your search terms or filters.")
        return

    columns = st.columns(3)
    for index, scholarship in enumerate(result.items):
        with columns[index % 3]:
            _render_scholarship_card(scholarship, key_prefix="browse")

    if result.total_pages > 1:
        prev_col, label_col, next_col = st.columns([1, 2, 1])
        if prev_col.button("Previous", disabled=result.page <= 1):
            st.session_state.browse_page = result.page - 1
            st.rerun()
        label_col.write(f"Page {result.page} of {result.total_pages}")
        if next_col.button("Next", disabled=result.page >= result.total_pages):
            st.session_state.browse_page = result.page + 1
            st.rerun()


def _render_login() -> None:
    session: Session = st.session_state.auth_session
    st.header("Sign in")
    with st.form("login_form"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in", type="primary")
    st.caption("Demo accounts: admin@demo.com, student@demo.com, school@demo.com (password: password)")
    if submitted and session.login(email, password):
        _go_to("Dashboard")


def _student_profile_fields(prefix: str) -> dict[str, Any]:
    first_col, last_col = st.columns(2)
    first_name = first_col.text_input("First name", key=f"{prefix}_first_name")
    last_name = last_col.text_input("Last name", key=f"{prefix}_last_name")
    date_of_birth = st.date_input(
        "Date of birth",
        value=date(2000, 1, 1),
        min_value=date(1900, 1, 1),
        key=f"{prefix}_dob",
    )
    gpa = st.number_input("GPA", min_value=0.0, max_value=4.0, step=0.01, key=f"{prefix}_gpa")
    major = st.text_input("Major", key=f"{prefix}_major")
    university = st.text_input("University", key=f"{prefix}_university")
    phone = st.text_input("Phone", key=f"{prefix}_phone")
    address = st.text_area("Address", key=f"{prefix}_address")
    return {
        "firstName": first_name,
        "lastName": last_name,
        "dateOfBirth": date_of_birth.isoformat(),
        "gpa": float(gpa),
        "major": major,
        "university": university,
        "phone": phone,
        "address": address,
        "documents": [],
    }


def _school_profile_fields(prefix: str) -> dict[str, Any]:
    return {
        "name": st.text_input("Institution name", key=f"{prefix}_school_name"),
        "description": st.text_area("Description", key=f"{prefix}_school_description"),
        "website": st.text_input("Website", key=f"{prefix}_school_website"),
        "address": st.text_area("Address", key=f"{prefix}_school_address"),
        "phone": st.text_input("Phone", key=f"{prefix}_school_phone"),
        "email": st.text_input("Contact email", key=f"{prefix}_school_email"),
    }


def _render_register() -> None:
    session: Session = st.session_state.auth_session
    st.header("Create Account")
    role = st.radio("Account Type", options=("student", "school", "admin"), horizontal=True)
    with st.form("register_form"):
        email = st.text_input("Email")
        password_col, confirm_col = st.columns(2)
        password = password_col.text_input("Password", type="password")
        confirm_password = confirm_col.text_input("Confirm password", type="password")
        if role == "student":
            profile = _student_profile_fields("register")
        elif role == "school":
            profile = _school_profile_fields("register")
        else:
            first_col, last_col = st.columns(2)
            profile = {
                "firstName": first_col.text_input("First name"),
                "lastName": last_col.text_input("Last name"),
                "department": "Administration",
            }
        submitted = st.form_submit_button("Create Account", type="primary")
    if submitted:
        registered = session.register(
            {"email": email, "password": password, "role": role, "profile": profile},
            confirm_password=confirm_password,
        )
        if registered:
            _go_to("Login")


def _render_documents(profile: StudentProfile) -> None:
    session: Session = st.session_state.auth_session
    st.subheader("My Documents")
    if not profile.documents:
        st.caption("No documents uploaded yet.")
    for document in profile.documents:
        name_col, download_col, delete_col = st.columns([3, 1, 1])
        name_col.write(f"{document.name} ({document.mime_type}) · {format_date(document.uploaded_at)}")
        try:
            download_col.download_button(
                "Download",
                data=decode_document(document),
                file_name=document.name,
                mime=document.mime_type,
                key=f"download_{document.id}",
            )
        except ValueError as exc:
            download_col.warning(str(exc))
        if delete_col.button("Delete", key=f"delete_doc_{document.id}"):
            remove_profile_document(session, document.id)
            st.rerun()

    with st.form("document_upload_form", clear_on_submit=True):
        document_name = st.text_input("Document name")
        upload = st.file_uploader("File", type=UPLOAD_TYPES)
        submitted = st.form_submit_button("Upload")
    if submitted:
        attachment = (
            Attachment(name=upload.name, payload=upload.getvalue(), mime_type=upload.type)
            if upload is not None
            else None
        )
        add_profile_document(session, document_name, attachment)
        st.rerun()


def _render_student_dashboard(user: User) -> None:
    session: Session = st.session_state.auth_session
    _, applications, _ = _repositories()
    profile = user.profile
    st.header(f"Welcome, {user.display_name}")

    applications_tab, profile_tab, documents_tab = st.tabs(["My Applications", "Profile", "Documents"])
    with applications_tab:
        my_applications = applications.list_by_student(user.id)
        if not my_applications:
            st.info("You have not applied to any scholarships yet.")
            if st.button("Browse Scholarships"):
                _go_to("Scholarships")
        for application in my_applications:
            with st.expander(f"{application.scholarship_name} · {status_badge(application.status)}"):
                st.caption(f"Submitted {format_date(application.submitted_at)}")
                st.write(application.essay)
                if application.documents:
                    st.write(", ".join(document.name for document in application.documents))

    with profile_tab:
        if isinstance(profile, StudentProfile):
            with st.form("student_profile_form"):
                first_col, last_col = st.columns(2)
                changes = {
                    "first_name": first_col.text_input("First name", value=profile.first_name),
                    "last_name": last_col.text_input("Last name", value=profile.last_name),
                    "date_of_birth": st.text_input("Date of birth", value=profile.date_of_birth),
                    "gpa": st.number_input(
                        "GPA", min_value=0.0, max_value=4.0, step=0.01, value=float(profile.gpa)
                    ),
                    "major": st.text_input("Major", value=profile.major),
                    "university": st.text_input("University", value=profile.university),
                    "phone": st.text_input("Phone", value=profile.phone),
                    "address": st.text_area("Address", value=profile.address),
                }
                if st.form_submit_button("Save Profile"):
                    session.update_profile(changes)
                    st.rerun()

    with documents_tab:
        if isinstance(profile, StudentProfile):
            _render_documents(profile)


def _render_school_dashboard(user: User) -> None:
    session: Session = st.session_state.auth_session
    scholarships, applications, _ = _repositories()
    st.header(f"{user.display_name} Dashboard")

    owned = scholarships.list_by_university(user.id)
    overview = school_overview(user.id, owned, applications.list_all())
    metric_cols = st.columns(4)
    metric_cols[0].metric("Scholarships", overview["scholarships"])
    metric_cols[1].metric("Applications", overview["applications"])
    metric_cols[2].metric("Pending", overview["pending"])
    metric_cols[3].metric("Accepted", overview["accepted"])

    scholarships_tab, create_tab, applications_tab, profile_tab = st.tabs(
        ["My Scholarships", "Create Scholarship", "Applications", "Profile"]
    )
    with scholarships_tab:
        if not owned:
            st.info("You have not created any scholarships yet.")
        for scholarship in owned:
            with st.container(border=True):
                state = "active" if scholarship.is_active else "inactive"
                st.markdown(f"**{scholarship.name}** ({state})")
                st.caption(
                    f"{format_amount(scholarship.amount)} · Deadline {format_date(scholarship.deadline)} · "
                    f"{scholarship.application_count} applications"
                )
                toggle_col, delete_col = st.columns(2)
                if toggle_col.button(
                    "Deactivate" if scholarship.is_active else "Activate",
                    key=f"school_toggle_{scholarship.id}",
                ):
                    toggle_scholarship(session, scholarships, scholarship.id)
                    st.rerun()
                if delete_col.button("Delete", key=f"school_delete_{scholarship.id}"):
                    delete_scholarship(session, scholarships, scholarship.id)
                    st.rerun()

    with create_tab:
        with st.form("create_scholarship_form", clear_on_submit=True):
            name = st.text_input("Scholarship name")
            description = st.text_area("Description")
            amount = st.number_input("Amount", min_value=0.0, step=500.0)
            deadline = st.date_input("Deadline", value=date.today())
            eligibility = st.text_area("Eligibility criteria")
            requirements = st.text_area("Requirements (one per line)")
            submitted = st.form_submit_button("Create Scholarship", type="primary")
        if submitted:
            create_scholarship(
                session,
                scholarships,
                {
                    "name": name,
                    "description": description,
                    "amount": amount,
                    "deadline": deadline.isoformat(),
                    "eligibility_criteria": eligibility,
                    "requirements": requirements_from_text(requirements),
                },
            )
            st.rerun()

    with applications_tab:
        received = applications.list_for_scholarships(item.id for item in owned)
        if not received:
            st.info("No applications received yet.")
        else:
            st.dataframe(applications_frame(received), use_container_width=True)
        for application in received:
            with st.expander(
                f"{application.student_name} → {application.scholarship_name} · {status_badge(application.status)}"
            ):
                st.caption(f"Submitted {format_date(application.submitted_at)}")
                st.write(application.essay)
                for document in application.documents:
                    try:
                        st.download_button(
                            f"Download {document.name}",
                            data=decode_document(document),
                            file_name=document.name,
                            mime=document.mime_type,
                            key=f"app_doc_{application.id}_{document.id}",
                        )
                    except ValueError as exc:
                        st.warning(str(exc))
                if application.status == "pending":
                    accept_col, reject_col = st.columns(2)
                    if accept_col.button("Accept", key=f"accept_{application.id}"):
                        review_application(session, scholarships, applications, application.id, "accepted")
                        st.rerun()
                    if reject_col.button("Reject", key=f"reject_{application.id}"):
                        review_application(session, scholarships, applications, application.id, "rejected")
                        st.rerun()

    with profile_tab:
        profile = user.profile
        if isinstance(profile, SchoolProfile):
            with st.form("school_profile_form"):
                changes = {
                    "name": st.text_input("Institution name", value=profile.name),
                    "description": st.text_area("Description", value=profile.description),
                    "website": st.text_input("Website", value=profile.website),
                    "address": st.text_area("Address", value=profile.address),
                    "phone": st.text_input("Phone", value=profile.phone),
                    "email": st.text_input("Contact email", value=profile.email),
                }
                if st.form_submit_button("Save Profile"):
                    session.update_profile(changes)
                    st.rerun()


def _render_admin_dashboard(user: User) -> None:
    session: Session = st.session_state.auth_session
    scholarships, _, users = _repositories()
    all_users = users.list_all()
    all_scholarships = scholarships.list_all()
    overview = admin_overview(all_users, all_scholarships)

    st.header("Admin Dashboard")
    metric_cols = st.columns(4)
    metric_cols[0].metric("Students", overview["students"])
    metric_cols[1].metric("Schools", overview["schools"])
    metric_cols[2].metric("Pending approvals", overview["pending_approvals"])
    metric_cols[3].metric("Active scholarships", overview["active_scholarships"])

    users_tab, scholarships_tab = st.tabs(["Users", "Scholarships"])
    with users_tab:
        for role in ("student", "school", "admin"):
            st.subheader(f"{role.capitalize()}s")
            for account in (item for item in all_users if item.role == role):
                name_col, state_col, action_col = st.columns([3, 1, 1])
                name_col.write(f"{account.display_name} · {account.email} · joined {format_date(account.created_at)}")
                state_col.write("approved" if account.is_approved else "pending")
                if role == "admin" or account.id == user.id:
                    continue
                if account.is_approved:
                    if action_col.button("Block", key=f"block_{account.id}"):
                        block_user(session, users, account.id)
                        st.rerun()
                elif action_col.button("Approve", key=f"approve_{account.id}"):
                    approve_user(session, users, account.id)
                    st.rerun()

    with scholarships_tab:
        for scholarship in all_scholarships:
            name_col, deadline_col, toggle_col, delete_col = st.columns([3, 1, 1, 1])
            name_col.write(f"{scholarship.name} · {scholarship.university_name}")
            deadline_col.write(format_date(scholarship.deadline))
            if toggle_col.button(
                "Deactivate" if scholarship.is_active else "Activate",
                key=f"admin_toggle_{scholarship.id}",
            ):
                toggle_scholarship(session, scholarships, scholarship.id)
                st.rerun()
            if delete_col.button("Delete", key=f"admin_delete_{scholarship.id}"):
                delete_scholarship(session, scholarships, scholarship.id)
                st.rerun()


def _render_dashboard() -> None:
    session: Session = st.session_state.auth_session
    user = session.refresh()
    if user is None:
        st.warning("Please login to view your dashboard.")
        return
    if user.role == "student":
        _render_student_dashboard(user)
    elif user.role == "school":
        _render_school_dashboard(user)
    else:
        _render_admin_dashboard(user)


def main() -> None:
    st.set_page_config(page_title="ScholarshipHub", layout="wide")
    _ensure_session_state()
    session: Session = st.session_state.auth_session

    with st.sidebar:
        st.title("ScholarshipHub")
        page = st.radio("Navigate", options=PAGES, index=PAGES.index(st.session_state.page))
        if page != st.session_state.page:
            st.session_state.page = page
            st.session_state.selected_scholarship_id = None
        st.divider()
        if session.user is not None:
            st.write(f"Signed in as **{session.user.display_name}** ({session.user.role})")
            if st.button("Logout", use_container_width=True):
                session.logout()
                _go_to("Home")
        else:
            st.caption("Not signed in.")

    _render_notifications()
    try:
        if st.session_state.page == "Home":
            _render_home()
        elif st.session_state.page == "Scholarships":
            _render_scholarships()
        elif st.session_state.page == "Dashboard":
            _render_dashboard()
        elif st.session_state.page == "Login":
            _render_login()
        else:
            _render_register()
    except ValueError as exc:
        st.error(f"Stored data could not be read: {exc}")
    _render_notifications()


if __name__ == "__main__":
    main()
