"""Built-in pattern catalog."""

import textwrap

from docforge.templates.schema import (
    ClientDeliverable,
    DeliverableType,
    PatternStyling,
    TemplatePattern,
    TemplateSection,
    TemplateVariable,
)


def _markup(source: str) -> str:
    return textwrap.dedent(source).strip()


def _var(name: str, type: str = "text", required: bool = True, default=None) -> TemplateVariable:
    if default is None and not required:
        default = {"number": 0, "array": []}.get(type, "")
    return TemplateVariable(name=name, type=type, required=required, default_value=default)


def load_builtin_patterns() -> dict[str, TemplatePattern]:
    """Build every catalog pattern, keyed by id."""
    patterns = [
        create_business_proposal_pattern(),
        create_meeting_minutes_pattern(),
        create_service_agreement_pattern(),
        create_case_study_pattern(),
        create_technical_documentation_pattern(),
        create_course_outline_pattern(),
    ]
    return {pattern.id: pattern for pattern in patterns}


def load_builtin_deliverables() -> dict[str, ClientDeliverable]:
    """Deliverables group catalog patterns by document type and industry."""
    deliverables = [
        ClientDeliverable(
            id="tech-proposal",
            type=DeliverableType.PROPOSAL,
            industry="technology",
            pattern_ids=("business-proposal", "technical-documentation"),
            content_variations=("web-development", "mobile-app", "api-integration"),
            output_formats=("pdf", "html"),
        ),
        ClientDeliverable(
            id="legal-contract",
            type=DeliverableType.CONTRACT,
            industry="legal",
            pattern_ids=("service-agreement",),
            content_variations=("consulting", "development", "maintenance"),
            output_formats=("pdf",),
        ),
        ClientDeliverable(
            id="marketing-report",
            type=DeliverableType.REPORT,
            industry="marketing",
            pattern_ids=("case-study",),
            content_variations=("campaign-results", "quarterly-review", "project-showcase"),
            output_formats=("pdf", "html"),
        ),
    ]
    return {deliverable.id: deliverable for deliverable in deliverables}


# =============================================================================
# BUSINESS
# =============================================================================

def create_business_proposal_pattern() -> TemplatePattern:
    """Client proposal: cover, summary, scope, timeline, pricing."""
    sections = (
        TemplateSection(
            id="cover",
            name="Cover Page",
            description="Professional cover with project title and company branding",
            content=_markup("""
                <div class="cover-page">
                  <h1>{{project_title}}</h1>
                  <h2>Business Proposal</h2>
                  <p class="client-info">Prepared for: {{client_name}}</p>
                  <p class="company-info">{{company_name}}</p>
                  <p class="date">{{proposal_date}}</p>
                </div>
            """),
            variables=["project_title", "client_name", "company_name", "proposal_date"],
        ),
        TemplateSection(
            id="executive-summary",
            name="Executive Summary",
            description="High-level overview of the proposed project",
            content=_markup("""
                <section class="executive-summary">
                  <h2>Executive Summary</h2>
                  <p>{{executive_summary}}</p>
                </section>
            """),
            variables=["executive_summary"],
        ),
        TemplateSection(
            id="scope",
            name="Project Scope",
            description="Detailed description of project deliverables and scope",
            content=_markup("""
                <section class="project-scope">
                  <h2>Project Scope</h2>
                  <p>{{project_scope}}</p>
                  <h3>Deliverables</h3>
                  <ul>
                    {{#each deliverables}}
                    <li>{{this}}</li>
                    {{/each}}
                  </ul>
                </section>
            """),
            variables=["project_scope", "deliverables"],
        ),
        TemplateSection(
            id="timeline",
            name="Timeline & Milestones",
            description="Project timeline with key milestones",
            content=_markup("""
                <section class="timeline">
                  <h2>Timeline & Milestones</h2>
                  <p>{{timeline}}</p>
                </section>
            """),
            variables=["timeline"],
        ),
        TemplateSection(
            id="pricing",
            name="Investment & Pricing",
            description="Cost breakdown and pricing structure",
            content=_markup("""
                <section class="pricing">
                  <h2>Investment</h2>
                  <p class="total-cost">Total Project Cost: ${{total_cost}}</p>
                </section>
            """),
            variables=["total_cost"],
        ),
    )

    return TemplatePattern(
        id="business-proposal",
        name="Business Proposal",
        category="business",
        description="Professional business proposal template with executive summary, scope, timeline, and pricing",
        use_case="Client project proposals, service offerings, partnership proposals",
        complexity="moderate",
        estimated_time="2-4 hours",
        variables=(
            _var("client_name"),
            _var("project_title"),
            _var("proposal_date", "date", required=False),
            _var("company_name", required=False),
            _var("executive_summary", required=False),
            _var("project_scope", required=False),
            _var("timeline", required=False),
            _var("total_cost", "number"),
            _var("deliverables", "array"),
        ),
        sections=sections,
        styling=PatternStyling(
            colors={"primary": "#2563eb", "secondary": "#64748b", "accent": "#0ea5e9"},
            fonts={"heading": "Inter, sans-serif", "body": "Inter, sans-serif"},
            spacing={"section": "2rem", "paragraph": "1rem"},
        ),
        tags=("proposal", "sales", "client"),
    )


def create_meeting_minutes_pattern() -> TemplatePattern:
    """Meeting record with attendees, agenda and an action table."""
    sections = (
        TemplateSection(
            id="header",
            name="Meeting Header",
            description="Meeting title, date, time, and basic information",
            content=_markup("""
                <div class="meeting-header">
                  <h1>{{meeting_title}}</h1>
                  <div class="meeting-info">
                    <p><strong>Date:</strong> {{meeting_date}}</p>
                    <p><strong>Time:</strong> {{meeting_time}}</p>
                    {{#if location}}<p><strong>Location:</strong> {{location}}</p>{{/if}}
                    <p><strong>Chair:</strong> {{chair}}</p>
                  </div>
                </div>
            """),
            variables=["meeting_title", "meeting_date", "meeting_time", "location", "chair"],
        ),
        TemplateSection(
            id="attendees",
            name="Attendees",
            description="List of meeting participants",
            content=_markup("""
                <section class="attendees">
                  <h2>Attendees</h2>
                  <ul>
                    {{#each attendees}}
                    <li>{{this}}</li>
                    {{/each}}
                  </ul>
                </section>
            """),
            variables=["attendees"],
        ),
        TemplateSection(
            id="agenda",
            name="Agenda & Discussion",
            description="Meeting agenda items and discussion points",
            content=_markup("""
                <section class="agenda">
                  <h2>Agenda & Discussion</h2>
                  {{#each agenda_items}}
                  <div class="agenda-item">
                    <h3>{{title}}</h3>
                    <p>{{discussion}}</p>
                    {{#if decisions}}<p><strong>Decisions:</strong> {{decisions}}</p>{{/if}}
                  </div>
                  {{/each}}
                </section>
            """),
            variables=["agenda_items"],
        ),
        TemplateSection(
            id="actions",
            name="Action Items",
            description="Follow-up actions and responsibilities",
            content=_markup("""
                <section class="action-items">
                  <h2>Action Items</h2>
                  <table>
                    <thead>
                      <tr>
                        <th>Action</th>
                        <th>Responsible</th>
                        <th>Due Date</th>
                        <th>Status</th>
                      </tr>
                    </thead>
                    <tbody>
                      {{#each action_items}}
                      <tr>
                        <td>{{action}}</td>
                        <td>{{responsible}}</td>
                        <td>{{due_date}}</td>
                        <td>{{status}}</td>
                      </tr>
                      {{/each}}
                    </tbody>
                  </table>
                </section>
            """),
            variables=["action_items"],
        ),
    )

    return TemplatePattern(
        id="meeting-minutes",
        name="Meeting Minutes",
        category="business",
        description="Structured meeting minutes template with attendees, agenda, and action items",
        use_case="Team meetings, client calls, board meetings, project reviews",
        complexity="simple",
        estimated_time="15-30 minutes",
        variables=(
            _var("meeting_title"),
            _var("meeting_date", "date"),
            _var("meeting_time"),
            _var("location", required=False),
            _var("chair"),
            _var("attendees", "array"),
            _var("agenda_items", "array"),
            _var("action_items", "array"),
            _var("next_meeting", required=False),
        ),
        sections=sections,
        styling=PatternStyling(
            colors={"primary": "#059669", "secondary": "#6b7280", "accent": "#10b981"},
            fonts={"heading": "Inter, sans-serif", "body": "Inter, sans-serif"},
            spacing={"section": "1.5rem", "paragraph": "0.75rem"},
        ),
        tags=("meeting", "minutes", "internal"),
    )


# =============================================================================
# LEGAL
# =============================================================================

def create_service_agreement_pattern() -> TemplatePattern:
    sections = (
        TemplateSection(
            id="title",
            name="Agreement Title",
            description="Formal title and contract date",
            content=_markup("""
                <div class="contract-title">
                  <h1>Service Agreement</h1>
                  <p class="contract-date">This Agreement is made on {{contract_date}}</p>
                </div>
            """),
            variables=["contract_date"],
        ),
        TemplateSection(
            id="parties",
            name="Parties",
            description="Legal identification of contracting parties",
            content=_markup("""
                <section class="parties">
                  <h2>Parties</h2>
                  <div class="party">
                    <h3>Service Provider</h3>
                    <p><strong>{{provider_name}}</strong></p>
                    <p>{{provider_address}}</p>
                  </div>
                  <div class="party">
                    <h3>Client</h3>
                    <p><strong>{{client_name}}</strong></p>
                    <p>{{client_address}}</p>
                  </div>
                </section>
            """),
            variables=["provider_name", "provider_address", "client_name", "client_address"],
        ),
        TemplateSection(
            id="services",
            name="Services",
            description="Description of services to be provided",
            content=_markup("""
                <section class="services">
                  <h2>Services</h2>
                  <p>{{service_description}}</p>
                  <p><strong>Start Date:</strong> {{start_date}}</p>
                  {{#if end_date}}<p><strong>End Date:</strong> {{end_date}}</p>{{/if}}
                </section>
            """),
            variables=["service_description", "start_date", "end_date"],
        ),
        TemplateSection(
            id="payment",
            name="Payment Terms",
            description="Payment schedule and terms",
            content=_markup("""
                <section class="payment">
                  <h2>Payment Terms</h2>
                  <p>{{payment_terms}}</p>
                </section>
            """),
            variables=["payment_terms"],
        ),
        TemplateSection(
            id="legal",
            name="Legal Terms",
            description="Standard legal clauses and governing law",
            content=_markup("""
                <section class="legal-terms">
                  <h2>Legal Terms</h2>
                  <p>This agreement shall be governed by the laws of {{governing_law}}.</p>
                  <h3>Signatures</h3>
                  <div class="signatures">
                    <div class="signature-block">
                      <p>{{provider_name}}</p>
                      <div class="signature-line"></div>
                      <p>Date: ________________</p>
                    </div>
                    <div class="signature-block">
                      <p>{{client_name}}</p>
                      <div class="signature-line"></div>
                      <p>Date: ________________</p>
                    </div>
                  </div>
                </section>
            """),
            variables=["governing_law", "provider_name", "client_name"],
        ),
    )

    return TemplatePattern(
        id="service-agreement",
        name="Service Agreement",
        category="legal",
        description="Professional service agreement template with terms, conditions, and legal clauses",
        use_case="Client contracts, service agreements, consulting contracts",
        complexity="complex",
        estimated_time="1-2 hours",
        variables=(
            _var("client_name"),
            _var("client_address"),
            _var("provider_name"),
            _var("provider_address"),
            _var("service_description"),
            _var("contract_date", "date"),
            _var("start_date", "date"),
            _var("end_date", "date", required=False),
            _var("payment_terms"),
            _var("governing_law"),
        ),
        sections=sections,
        styling=PatternStyling(
            colors={"primary": "#1f2937", "secondary": "#6b7280", "accent": "#374151"},
            fonts={"heading": "Times New Roman, serif", "body": "Times New Roman, serif"},
            spacing={"section": "2rem", "paragraph": "1rem"},
        ),
        tags=("contract", "legal", "agreement"),
    )


# =============================================================================
# MARKETING
# =============================================================================

def create_case_study_pattern() -> TemplatePattern:
    sections = (
        TemplateSection(
            id="overview",
            name="Project Overview",
            description="High-level project summary and client information",
            content=_markup("""
                <section class="overview">
                  <h1>{{project_title}}</h1>
                  <div class="client-info">
                    <h2>{{client_name}}</h2>
                    <p class="industry">{{industry}}</p>
                  </div>
                </section>
            """),
            variables=["project_title", "client_name", "industry"],
        ),
        TemplateSection(
            id="challenge",
            name="The Challenge",
            description="Description of the problem or challenge faced",
            content=_markup("""
                <section class="challenge">
                  <h2>The Challenge</h2>
                  <p>{{challenge}}</p>
                </section>
            """),
            variables=["challenge"],
        ),
        TemplateSection(
            id="solution",
            name="Our Solution",
            description="Detailed explanation of the solution provided",
            content=_markup("""
                <section class="solution">
                  <h2>Our Solution</h2>
                  <p>{{solution}}</p>
                </section>
            """),
            variables=["solution"],
        ),
        TemplateSection(
            id="results",
            name="Results & Impact",
            description="Outcomes and measurable results achieved",
            content=_markup("""
                <section class="results">
                  <h2>Results & Impact</h2>
                  <p>{{results}}</p>
                  {{#if metrics}}
                  <div class="metrics">
                    <h3>Key Metrics</h3>
                    {{#each metrics}}
                    <div class="metric">
                      <span class="value">{{value}}</span>
                      <span class="label">{{label}}</span>
                    </div>
                    {{/each}}
                  </div>
                  {{/if}}
                </section>
            """),
            variables=["results", "metrics"],
        ),
    )

    return TemplatePattern(
        id="case-study",
        name="Case Study",
        category="marketing",
        description="Professional case study template showcasing client success stories",
        use_case="Client success stories, project showcases, marketing materials",
        complexity="moderate",
        estimated_time="1-3 hours",
        variables=(
            _var("client_name"),
            _var("project_title"),
            _var("industry"),
            _var("challenge"),
            _var("solution"),
            _var("results"),
            _var("metrics", "array", required=False),
            _var("testimonial", required=False),
            _var("testimonial_author", required=False),
        ),
        sections=sections,
        styling=PatternStyling(
            colors={"primary": "#7c3aed", "secondary": "#6b7280", "accent": "#a855f7"},
            fonts={"heading": "Inter, sans-serif", "body": "Inter, sans-serif"},
            spacing={"section": "2.5rem", "paragraph": "1rem"},
        ),
        tags=("case-study", "marketing", "showcase"),
    )


# =============================================================================
# TECHNICAL
# =============================================================================

def create_technical_documentation_pattern() -> TemplatePattern:
    sections = (
        TemplateSection(
            id="introduction",
            name="Introduction",
            description="Product overview and version information",
            content=_markup("""
                <section class="introduction">
                  <h1>{{product_name}} Documentation</h1>
                  <p class="version">Version {{version}}</p>
                  <h2>Overview</h2>
                  <p>{{overview}}</p>
                </section>
            """),
            variables=["product_name", "version", "overview"],
        ),
        TemplateSection(
            id="getting-started",
            name="Getting Started",
            description="Prerequisites and installation instructions",
            content=_markup("""
                <section class="getting-started">
                  <h2>Getting Started</h2>
                  {{#if prerequisites}}
                  <h3>Prerequisites</h3>
                  <ul>
                    {{#each prerequisites}}
                    <li>{{this}}</li>
                    {{/each}}
                  </ul>
                  {{/if}}
                  <h3>Installation</h3>
                  <ol>
                    {{#each installation_steps}}
                    <li>{{this}}</li>
                    {{/each}}
                  </ol>
                </section>
            """),
            variables=["prerequisites", "installation_steps"],
        ),
    )

    return TemplatePattern(
        id="technical-documentation",
        name="Technical Documentation",
        category="technical",
        description="Comprehensive technical documentation template with code examples and API references",
        use_case="API documentation, technical guides, system documentation",
        complexity="complex",
        estimated_time="2-4 hours",
        variables=(
            _var("product_name"),
            _var("version"),
            _var("overview"),
            _var("prerequisites", "array", required=False),
            _var("installation_steps", "array"),
            _var("configuration", required=False),
            _var("api_endpoints", "array", required=False),
        ),
        sections=sections,
        styling=PatternStyling(
            colors={"primary": "#1f2937", "secondary": "#6b7280", "accent": "#3b82f6"},
            fonts={"heading": "JetBrains Mono, monospace", "body": "Inter, sans-serif"},
            spacing={"section": "2rem", "paragraph": "1rem"},
        ),
        tags=("documentation", "technical", "api"),
    )


# =============================================================================
# EDUCATIONAL
# =============================================================================

def create_course_outline_pattern() -> TemplatePattern:
    sections = (
        TemplateSection(
            id="course-info",
            name="Course Information",
            description="Basic course details and instructor information",
            content=_markup("""
                <section class="course-info">
                  <h1>{{course_title}}</h1>
                  <div class="course-details">
                    <p><strong>Instructor:</strong> {{instructor}}</p>
                    <p><strong>Duration:</strong> {{duration}}</p>
                  </div>
                  <h2>Course Description</h2>
                  <p>{{course_description}}</p>
                </section>
            """),
            variables=["course_title", "instructor", "duration", "course_description"],
        ),
        TemplateSection(
            id="objectives",
            name="Learning Objectives",
            description="Course learning outcomes and objectives",
            content=_markup("""
                <section class="objectives">
                  <h2>Learning Objectives</h2>
                  <ul>
                    {{#each learning_objectives}}
                    <li>{{this}}</li>
                    {{/each}}
                  </ul>
                </section>
            """),
            variables=["learning_objectives"],
        ),
        TemplateSection(
            id="curriculum",
            name="Course Modules",
            description="Detailed curriculum breakdown by modules",
            content=_markup("""
                <section class="curriculum">
                  <h2>Course Modules</h2>
                  {{#each modules}}
                  <div class="module">
                    <h3>Module {{number}}: {{title}}</h3>
                    <p>{{description}}</p>
                    <p><strong>Duration:</strong> {{duration}}</p>
                    {{#if topics}}
                    <ul>
                      {{#each topics}}
                      <li>{{this}}</li>
                      {{/each}}
                    </ul>
                    {{/if}}
                  </div>
                  {{/each}}
                </section>
            """),
            variables=["modules"],
        ),
    )

    return TemplatePattern(
        id="course-outline",
        name="Course Outline",
        category="educational",
        description="Structured course outline template with modules, objectives, and assessments",
        use_case="Training programs, educational courses, workshop planning",
        complexity="moderate",
        estimated_time="1-2 hours",
        variables=(
            _var("course_title"),
            _var("instructor"),
            _var("duration"),
            _var("course_description"),
            _var("learning_objectives", "array"),
            _var("modules", "array"),
            _var("assessments", "array", required=False),
        ),
        sections=sections,
        styling=PatternStyling(
            colors={"primary": "#dc2626", "secondary": "#6b7280", "accent": "#ef4444"},
            fonts={"heading": "Inter, sans-serif", "body": "Inter, sans-serif"},
            spacing={"section": "2rem", "paragraph": "1rem"},
        ),
        tags=("course", "training", "education"),
    )
