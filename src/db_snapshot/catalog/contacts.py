"""Built-in catalog for the contact-management dataset.

Sixteen tables in parent-first order.  ``Contact.referredById`` is the
nullable self-reference (a contact referred by another contact).
"""

from db_snapshot.catalog.models import ForeignKey, TableCatalog, TableDef


def _fk(column: str, references: str, nullable: bool = False) -> ForeignKey:
    return ForeignKey(column=column, references=references, nullable=nullable)


CONTACTS_CATALOG = TableCatalog(
    tables=[
        TableDef(name="Company"),
        TableDef(
            name="Contact",
            foreign_keys=[
                _fk("companyId", "Company", nullable=True),
                _fk("referredById", "Contact", nullable=True),
            ],
        ),
        TableDef(name="Tag"),
        TableDef(name="Idea"),
        TableDef(
            name="EmploymentHistory",
            foreign_keys=[
                _fk("contactId", "Contact"),
                _fk("companyId", "Company", nullable=True),
            ],
        ),
        TableDef(
            name="Conversation",
            foreign_keys=[
                _fk("contactId", "Contact", nullable=True),
                _fk("companyId", "Company", nullable=True),
            ],
        ),
        TableDef(
            name="Action",
            foreign_keys=[
                _fk("contactId", "Contact", nullable=True),
                _fk("companyId", "Company", nullable=True),
                _fk("conversationId", "Conversation", nullable=True),
            ],
        ),
        TableDef(
            name="ContactTag",
            foreign_keys=[_fk("contactId", "Contact"), _fk("tagId", "Tag")],
        ),
        TableDef(
            name="CompanyTag",
            foreign_keys=[_fk("companyId", "Company"), _fk("tagId", "Tag")],
        ),
        TableDef(
            name="ConversationContact",
            foreign_keys=[
                _fk("conversationId", "Conversation"),
                _fk("contactId", "Contact"),
            ],
        ),
        TableDef(
            name="ConversationCompany",
            foreign_keys=[
                _fk("conversationId", "Conversation"),
                _fk("companyId", "Company"),
            ],
        ),
        TableDef(
            name="IdeaContact",
            foreign_keys=[_fk("ideaId", "Idea"), _fk("contactId", "Contact")],
        ),
        TableDef(
            name="IdeaCompany",
            foreign_keys=[_fk("ideaId", "Idea"), _fk("companyId", "Company")],
        ),
        TableDef(
            name="Link",
            foreign_keys=[
                _fk("contactId", "Contact", nullable=True),
                _fk("companyId", "Company", nullable=True),
                _fk("actionId", "Action", nullable=True),
            ],
        ),
        TableDef(
            name="PrepNote",
            foreign_keys=[_fk("contactId", "Contact")],
        ),
        TableDef(
            name="Relationship",
            foreign_keys=[
                _fk("fromContactId", "Contact"),
                _fk("toContactId", "Contact"),
            ],
        ),
    ]
)
