# Services package init
"""
Firenotes — Services Layer
===========================

What:  Gateways over the identity provider and the document store, the Home
       view-state controller, and the wiring that builds them per client.
Why:   Routes handle HTTP; everything that talks to a provider or holds view
       state lives here and can be tested without HTTP.

Service Inventory:
    - IdentityProvider (abstract) / FirebaseIdentityProvider
    - IdentityGateway: sign-up, sign-in, sign-out, reset, current user
    - DocumentStore (abstract) / FirestoreDocumentStore / SqlDocumentStore
    - RecordStoreGateway: CRUD for notes and products
    - StateCell: ticketed observable state
    - HomeController: notes/products view state of one client
    - SessionRegistry / ClientContext: live signed-in clients
    - AppServices: backend selection and per-client wiring
"""
