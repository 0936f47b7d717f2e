# chantier/services/demo_data.py
"""Demonstration data set: three projects with blocks, contractors, reserves, tasks and receptions."""
from typing import Dict, List

from chantier.db.enums import (
    ApartmentStatus,
    ApartmentType,
    CollectionKey,
    ContractorStatus,
    Priority,
    ProjectStatus,
    ReserveStatus,
    TaskStatus,
)
from chantier.schemas.base import EntityModel
from chantier.schemas.entities import (
    Apartment,
    Block,
    Category,
    Contractor,
    Project,
    Reception,
    Reserve,
    Task,
)


def build_demo_data() -> Dict[CollectionKey, List[EntityModel]]:
    projects = [
        Project(
            id="proj1",
            name="Résidence Les Jardins",
            description="Complexe résidentiel de 150 appartements avec espaces verts",
            start_date="2024-01-15",
            end_date="2025-06-30",
            status=ProjectStatus.in_progress,
            created_at="2024-01-15T10:00:00Z",
        ),
        Project(
            id="proj2",
            name="Tour Horizon",
            description="Immeuble de bureaux de 25 étages au centre-ville",
            start_date="2024-03-01",
            end_date="2025-12-31",
            status=ProjectStatus.in_progress,
            created_at="2024-03-01T09:00:00Z",
        ),
        Project(
            id="proj3",
            name="Villa Premium",
            description="Villas de luxe avec piscine et jardin privatif",
            start_date="2024-02-01",
            end_date="2024-11-30",
            status=ProjectStatus.pending,
            created_at="2024-02-01T11:00:00Z",
        ),
    ]

    blocks = [
        Block(id="block1", project_id="proj1", name="Bloc A",
              description="Premier bloc résidentiel - 50 appartements", created_at="2024-01-20T10:00:00Z"),
        Block(id="block2", project_id="proj1", name="Bloc B",
              description="Deuxième bloc résidentiel - 50 appartements", created_at="2024-01-20T10:30:00Z"),
        Block(id="block3", project_id="proj1", name="Bloc C",
              description="Troisième bloc résidentiel - 50 appartements", created_at="2024-01-20T11:00:00Z"),
        Block(id="block4", project_id="proj2", name="Tour Est",
              description="Partie est de la tour - étages 1-12", created_at="2024-03-05T09:00:00Z"),
        Block(id="block5", project_id="proj2", name="Tour Ouest",
              description="Partie ouest de la tour - étages 13-25", created_at="2024-03-05T09:30:00Z"),
    ]

    apartments = [
        Apartment(id="apt1", block_id="block1", project_id="proj1", number="A101", type=ApartmentType.apartment,
                  surface=85, status=ApartmentStatus.free, created_at="2024-01-25T10:00:00Z"),
        Apartment(id="apt2", block_id="block1", project_id="proj1", number="A102", type=ApartmentType.apartment,
                  surface=95, status=ApartmentStatus.reserved, created_at="2024-01-25T10:15:00Z"),
        Apartment(id="apt3", block_id="block2", project_id="proj1", number="B201", type=ApartmentType.duplex,
                  surface=120, status=ApartmentStatus.sold, created_at="2024-01-25T10:30:00Z"),
        Apartment(id="apt4", block_id="block3", project_id="proj1", number="C301", type=ApartmentType.studio,
                  surface=45, status=ApartmentStatus.free, created_at="2024-01-25T10:45:00Z"),
    ]

    categories = [
        Category(id="cat1", name="Plomberie", description="Installation et maintenance des systèmes de plomberie",
                 color="#3B82F6", created_at="2024-01-10T08:00:00Z"),
        Category(id="cat2", name="Électricité", description="Installation électrique et éclairage",
                 color="#F59E0B", created_at="2024-01-10T08:15:00Z"),
        Category(id="cat3", name="Peinture", description="Travaux de peinture et finitions",
                 color="#10B981", created_at="2024-01-10T08:30:00Z"),
        Category(id="cat4", name="Carrelage", description="Pose de carrelage et revêtements sols",
                 color="#8B5CF6", created_at="2024-01-10T08:45:00Z"),
        Category(id="cat5", name="Menuiserie", description="Installation portes, fenêtres et mobilier",
                 color="#EF4444", created_at="2024-01-10T09:00:00Z"),
    ]

    contractors = [
        Contractor(id="cont1", name="Ahmed Plomberie SARL", email="contact@ahmed-plomberie.ma",
                   phone="+212 6 12 34 56 78", specialty="Plomberie générale", project_id="proj1",
                   category_ids=["cat1"], contract_start="2024-01-01", contract_end="2024-12-31",
                   status=ContractorStatus.active, created_at="2024-01-05T09:00:00Z"),
        Contractor(id="cont2", name="ElectroTech Solutions", email="info@electrotech.ma",
                   phone="+212 6 98 76 54 32", specialty="Installation électrique industrielle", project_id="proj1",
                   category_ids=["cat2"], contract_start="2024-02-01", contract_end="2025-01-31",
                   status=ContractorStatus.active, created_at="2024-01-05T09:15:00Z"),
        Contractor(id="cont3", name="Peinture Atlas", email="atlas.peinture@gmail.com",
                   phone="+212 6 55 44 33 22", specialty="Peinture décorative", project_id="proj2",
                   category_ids=["cat3"], contract_start="2023-12-01", contract_end="2024-11-30",
                   status=ContractorStatus.active, created_at="2024-01-05T09:30:00Z"),
        Contractor(id="cont4", name="Carrelage Expert", email="expert@carrelage.ma",
                   phone="+212 6 77 88 99 00", specialty="Carrelage haut de gamme", project_id="proj1",
                   category_ids=["cat4"], contract_start="2024-01-15", contract_end="2024-12-15",
                   status=ContractorStatus.active, created_at="2024-01-05T09:45:00Z"),
        Contractor(id="cont5", name="Menuiserie Moderne", email="contact@menuiserie-moderne.ma",
                   phone="+212 6 11 22 33 44", specialty="Menuiserie sur mesure", project_id="proj2",
                   category_ids=["cat5"], contract_start="2024-03-01", contract_end="2025-02-28",
                   status=ContractorStatus.active, created_at="2024-01-05T10:00:00Z"),
    ]

    reserves = [
        Reserve(id="res1", project_id="proj1", block_id="block1", apartment_id="apt1", category_id="cat1",
                contractor_id="cont1", title="Fuite dans la salle de bain",
                description="Problème de fuite au niveau du robinet de la salle de bain principale",
                status=ReserveStatus.open, priority=Priority.urgent, created_at="2024-01-30T14:00:00Z"),
        Reserve(id="res2", project_id="proj1", block_id="block2", category_id="cat2", contractor_id="cont2",
                title="Problème électrique cuisine",
                description="Les prises de courant de la cuisine ne fonctionnent pas correctement",
                status=ReserveStatus.in_progress, priority=Priority.normal, created_at="2024-02-05T09:30:00Z"),
        Reserve(id="res3", project_id="proj2", block_id="block4", category_id="cat3", contractor_id="cont3",
                title="Retouche peinture bureau",
                description="Quelques retouches de peinture nécessaires dans les bureaux du 5ème étage",
                status=ReserveStatus.resolved, priority=Priority.low, created_at="2024-02-10T11:00:00Z",
                resolved_at="2024-02-15T16:30:00Z"),
        Reserve(id="res4", project_id="proj1", block_id="block3", category_id="cat4", contractor_id="cont4",
                title="Carrelage fissuré",
                description="Plusieurs carreaux présentent des fissures dans le hall d'entrée",
                status=ReserveStatus.open, priority=Priority.normal, created_at="2024-02-12T10:15:00Z"),
    ]

    tasks = [
        Task(id="task1", title="Installation plomberie Bloc A",
             description="Installation complète du système de plomberie pour le Bloc A", project_id="proj1",
             assigned_to="Ahmed Plomberie SARL", start_date="2024-02-01", end_date="2024-03-15", duration=43,
             status=TaskStatus.in_progress, priority=Priority.urgent, progress=65,
             created_at="2024-01-25T10:00:00Z"),
        Task(id="task2", title="Câblage électrique Tour Est",
             description="Installation du câblage électrique pour les étages 1-12", project_id="proj2",
             assigned_to="ElectroTech Solutions", start_date="2024-03-01", end_date="2024-05-30", duration=90,
             status=TaskStatus.pending, priority=Priority.normal, progress=0,
             created_at="2024-02-20T11:00:00Z"),
        Task(id="task3", title="Peinture façade extérieure",
             description="Application de la peinture sur la façade extérieure du Bloc B", project_id="proj1",
             assigned_to="Peinture Atlas", start_date="2024-04-01", end_date="2024-04-20", duration=19,
             status=TaskStatus.pending, priority=Priority.normal, progress=0, dependencies=["task1"],
             created_at="2024-02-25T09:30:00Z"),
        Task(id="task4", title="Pose carrelage hall principal",
             description="Installation du carrelage dans le hall principal du bâtiment", project_id="proj2",
             assigned_to="Carrelage Expert", start_date="2024-05-15", end_date="2024-06-15", duration=31,
             status=TaskStatus.pending, priority=Priority.low, progress=0, dependencies=["task2"],
             created_at="2024-03-01T14:00:00Z"),
    ]

    receptions = [
        Reception(id="rec1", project_id="proj1", block_id="block1", category_id="cat1",
                  pv_number="PV-Résidence-Les-Jardins-20-03-2024", date="2024-03-20",
                  responsible_parties=["Ahmed Plomberie SARL", "Chef de projet", "Architecte"],
                  has_reserves=True, reserve_count=2, is_on_time=False, delay_days=5, pv_generated=True,
                  pv_content="Réception effectuée avec quelques réserves mineures...",
                  created_at="2024-03-20T15:00:00Z"),
        Reception(id="rec2", project_id="proj2", block_id="block4",
                  pv_number="PV-Tour-Horizon-10-04-2024", date="2024-04-10",
                  responsible_parties=["ElectroTech Solutions", "Maître d'ouvrage"],
                  has_reserves=False, reserve_count=0, is_on_time=True, delay_days=0, pv_generated=True,
                  pv_content="Réception sans réserve, travaux conformes...",
                  created_at="2024-04-10T16:30:00Z"),
    ]

    return {
        CollectionKey.projects: projects,
        CollectionKey.blocks: blocks,
        CollectionKey.apartments: apartments,
        CollectionKey.categories: categories,
        CollectionKey.contractors: contractors,
        CollectionKey.reserves: reserves,
        CollectionKey.tasks: tasks,
        CollectionKey.receptions: receptions,
    }
